"""
Shared crash log fixtures.
"""
import pytest

from crashlog.core.notifier import NotifierInfo

SAMPLE_CRASH_LOG = """\
Incident Identifier: 1B2C3D4E-0000-1111-2222-333344445555
CrashReporter Key:   abc123def456
Hardware Model:      iPhone12,1
Process:             MyApp [1234]
Path:                /private/var/containers/Bundle/Application/0F1E/MyApp.app/MyApp
Identifier:          com.example.MyApp
Version:             1.2.3 (45)
Code Type:           ARM-64 (Native)
Role:                Foreground
Parent Process:      launchd [1]

Date/Time:           2020-03-04 10:11:12.345 +0100
Launch Time:         2020-03-04 10:10:00.000 +0100
OS Version:          iPhone OS 13.3.1 (17D50)
Release Type:        User
Report Version:      104

Exception Type:  EXC_CRASH (SIGABRT)
Exception Codes: 0x0000000000000000, 0x0000000000000000
Termination Reason: Namespace SIGNAL, Code 0x6
Triggered by Thread:  0

Thread 0 name:  Dispatch queue: com.apple.main-thread
Thread 0 Crashed:
0   libsystem_kernel.dylib        \t0x00000001b7a3aec4 __pthread_kill + 8
1   libsystem_pthread.dylib       \t0x00000001b795a7d8 pthread_kill + 192
2   MyApp                         \t0x0000000100ea4f1c 0x100e9c000 + 36636

Thread 1:
0   libsystem_pthread.dylib       \t0x00000001b795f758 start_wqthread + 0

Thread 2 name:  com.apple.uikit.eventfetch-thread
Thread 2:
0   libsystem_kernel.dylib        \t0x00000001b7a182f4 mach_msg_trap + 8
1   Foundation                    \t0x00000001b7e1a2b0 -[NSThread main] + 32

Thread 0 crashed with ARM Thread State (64-bit):
    x0: 0x0000000000000000   x1: 0x0000000000000000   x2: 0x0000000000000000   x3: 0x0000000000000000
    fp: 0x000000016f3627c0   lr: 0x00000001b795a7d8
    sp: 0x000000016f3627a0   pc: 0x00000001b7a3aec4 cpsr: 0x40000000
   esr: 0x56000080  Address size fault

Binary Images:
0x100e9c000 - 0x100ea7fff MyApp arm64  <aabbccdd11223344aabbccdd11223344> /private/var/containers/Bundle/Application/0F1E/MyApp.app/MyApp
0x1b7a16000 - 0x1b7a43fff libsystem_kernel.dylib arm64e  <0a6e4d1b7d4a3c1e9d3c6a8b2f1e4d5c> /usr/lib/system/libsystem_kernel.dylib
0x1b7957000 - 0x1b7966fff libsystem_pthread.dylib arm64e  <1f4e2b3c4d5e6f708192a3b4c5d6e7f8> /usr/lib/system/libsystem_pthread.dylib

EOF
"""

MINIMAL_CRASH_LOG = """\
Version: 1.2.3 (45)
OS Version: iPhone OS 14.0 (18A373)
Date/Time: 2021-01-02 03:04:05.678 +0000

Thread 0 Crashed:
0 MyApp 0x0000000100000000 0x100000000 + 0

Thread 0 crashed with ARM Thread State (64-bit):
    pc: 0x0000000100000000

Binary Images:
0x100000000 - 0x100003fff MyApp arm64 <AABBCCDD11223344AABBCCDD11223344> /Applications/MyApp.app/MyApp
EOF
"""


@pytest.fixture
def sample_log() -> str:
    return SAMPLE_CRASH_LOG


@pytest.fixture
def minimal_log() -> str:
    return MINIMAL_CRASH_LOG


@pytest.fixture
def notifier() -> NotifierInfo:
    return NotifierInfo(name="crashlog-notifier", url="https://example.com/notifier", version="9.9.9")
