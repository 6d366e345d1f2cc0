"""
Crash Log Parser
================
Converts a plain-text crash log into a structured Report.

The log is read top to bottom in a single pass by a four-state machine:

    HEADER     "Key: value" fields, until the first thread line
    THREAD     thread name / crash-marker lines and their stack frames
    REGISTERS  the crashed thread's register dump (only pc and lr are kept)
    IMAGES     one line per loaded binary image, until a blank line or "EOF"

Each state handler looks at one trimmed line and answers with the next state
and whether it consumed the line. A handler that does not consume its line
hands it to the next state unchanged (lookahead without advancing).

Contract:
    - Regex pattern matching only, no symbolication.
    - Unknown lines are skipped; in IMAGES they are logged as warnings.
    - A log with no header fields, or a stack frame outside any thread
      section, raises MalformedReportError.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from crashlog.core.errors import MalformedReportError
from crashlog.models.report import Backtrace, BinaryImage, Frame, Report, image_key
from crashlog.parser.app_uuid import AppUUIDPolicy, first_image_uuid

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Line Patterns
# ---------------------------------------------------------------------------
# Hardware Model:      iPhone12,1
_HEADER_FIELD = re.compile(r"^([A-Za-z][^:]*?):\s*(.+)$")

# Thread 0 name:  Dispatch queue: com.apple.main-thread
_THREAD_NAME = re.compile(r"^Thread (\d+) name:\s*(.*)$")

# Thread 0 Crashed:   /   Thread 3:   /   Thread 0 Crashed:: Dispatch queue: ...
_THREAD_MARKER = re.compile(r"^Thread (\d+)( Crashed)?:(.*)$")

# Thread 0 crashed with ARM Thread State (64-bit):
_THREAD_STATE = re.compile(r"^Thread \d+ crashed with .*Thread State", re.IGNORECASE)

_BINARY_IMAGES = re.compile(r"^Binary Images:")

# 0   libsystem_kernel.dylib   0x00000001d5b6e0dc __pthread_kill + 8
# 3   MyApp                    0x0000000100ea4f1c main + 52 (main.m:14)
_STACK_FRAME = re.compile(
    r"^(\d+)\s+(.+?)\s+(0x[0-9A-Fa-f]+)\s+(.+?)"
    r"(?:\s+\+\s+(\d+))?(?:\s+\(.*\))?$"
)

#     fp: 0x000000016f7ee540   lr: 0x00000001d5a8e7d4   sp: 0x000000016f7ee520
_REGISTER = re.compile(r"\b([a-z][a-z0-9]*):\s*(0x[0-9A-Fa-f]+)")
_CAPTURED_REGISTERS = ("pc", "lr")

# 0x1836a5000 - 0x1836e6fff libdispatch.dylib arm64  <2a2a5fd4...> /usr/lib/system/libdispatch.dylib
_BINARY_IMAGE = re.compile(
    r"^(0x[0-9A-Fa-f]+)\s*-\s*(0x[0-9A-Fa-f]+)\s+\+?(.+?)\s+(\S+)\s+"
    r"<([0-9A-Fa-f-]+)>\s+(.+)$"
)

_END_OF_LOG = "EOF"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
class ParserState(Enum):
    HEADER = "header"
    THREAD = "thread"
    REGISTERS = "registers"
    IMAGES = "images"
    DONE = "done"


@dataclass
class _Step:
    """Result of one handler call."""
    state: ParserState
    consumed: bool = True


@dataclass
class _ParseContext:
    """Everything the handlers build up; passed explicitly to each handler."""
    report: Report = field(default_factory=Report)
    pending: Optional[Backtrace] = None
    images: list[BinaryImage] = field(default_factory=list)
    line_number: int = 0


def _parse_header_line(line: str, ctx: _ParseContext) -> _Step:
    if _THREAD_NAME.match(line) or _THREAD_MARKER.match(line):
        return _Step(ParserState.THREAD, consumed=False)

    match = _HEADER_FIELD.match(line)
    if match:
        ctx.report.header[match.group(1).strip()] = match.group(2).strip()
    return _Step(ParserState.HEADER)


def _parse_thread_line(line: str, ctx: _ParseContext) -> _Step:
    if not line:
        # A blank line closes the current thread section
        ctx.pending = None
        return _Step(ParserState.THREAD)

    if _THREAD_STATE.match(line):
        return _Step(ParserState.REGISTERS)
    if _BINARY_IMAGES.match(line):
        return _Step(ParserState.IMAGES)

    match = _THREAD_NAME.match(line)
    if match:
        index, name = match.group(1), match.group(2).strip() or None
        if ctx.pending is not None and ctx.pending.index == index:
            ctx.pending.name = name
        else:
            ctx.pending = Backtrace(index=index, name=name)
            ctx.report.backtraces.append(ctx.pending)
        return _Step(ParserState.THREAD)

    match = _THREAD_MARKER.match(line)
    if match:
        index = match.group(1)
        crashed = match.group(2) is not None
        if ctx.pending is not None and ctx.pending.index == index:
            ctx.pending.crashed = crashed
        else:
            # macOS style: "Thread 0 Crashed:: Dispatch queue: ..."
            trailing = match.group(3).lstrip(":").strip() or None
            ctx.pending = Backtrace(index=index, name=trailing, crashed=crashed)
            ctx.report.backtraces.append(ctx.pending)
        return _Step(ParserState.THREAD)

    match = _STACK_FRAME.match(line)
    if match:
        if ctx.pending is None:
            raise MalformedReportError(
                "stack frame outside of a thread section", line_number=ctx.line_number
            )
        ctx.pending.stacktrace.append(Frame(
            frame_address=match.group(3),
            macho_file=match.group(2),
            method=match.group(4),
        ))
    return _Step(ParserState.THREAD)


def _parse_register_line(line: str, ctx: _ParseContext) -> _Step:
    if _BINARY_IMAGES.match(line):
        return _Step(ParserState.IMAGES)

    for name, value in _REGISTER.findall(line):
        if name == "pc":
            ctx.report.program_counter = value
        elif name == "lr":
            ctx.report.link_register = value
    return _Step(ParserState.REGISTERS)


def _parse_image_line(line: str, ctx: _ParseContext) -> _Step:
    if not line or line == _END_OF_LOG:
        return _Step(ParserState.DONE)

    match = _BINARY_IMAGE.match(line)
    if not match:
        logger.warning("Unrecognized binary image line %d: %s", ctx.line_number, line)
        return _Step(ParserState.IMAGES)

    try:
        image = BinaryImage(
            addr=match.group(1),
            name=match.group(3),
            uuid=match.group(5),
            path=match.group(6).strip(),
        )
    except ValueError as e:
        logger.warning("Invalid binary image line %d: %s", ctx.line_number, e)
        return _Step(ParserState.IMAGES)

    ctx.images.append(image)
    ctx.report.binary_images[image_key(image.path)] = image
    return _Step(ParserState.IMAGES)


_HANDLERS: dict[ParserState, Callable[[str, _ParseContext], _Step]] = {
    ParserState.HEADER: _parse_header_line,
    ParserState.THREAD: _parse_thread_line,
    ParserState.REGISTERS: _parse_register_line,
    ParserState.IMAGES: _parse_image_line,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def parse(text: str, app_uuid_policy: AppUUIDPolicy = first_image_uuid) -> Report:
    """
    Parse crash log text into a Report.

    Parameters
    ----------
    text : str
        Full contents of the crash log.
    app_uuid_policy : callable
        Picks the host app UUID from the parsed images, in log order.

    Returns
    -------
    Report
        Populated report. The caller must treat it as read-only.

    Raises
    ------
    MalformedReportError
        No header field was recognized, or a stack frame appeared before
        any thread header.
    """
    lines = [line.strip() for line in text.splitlines()]
    ctx = _ParseContext()
    state = ParserState.HEADER
    index = 0

    while index < len(lines) and state is not ParserState.DONE:
        ctx.line_number = index + 1
        step = _HANDLERS[state](lines[index], ctx)
        if step.state is not state:
            logger.debug("Line %d: %s -> %s", ctx.line_number, state.value, step.state.value)
            state = step.state
        if step.consumed:
            index += 1

    report = ctx.report
    if not report.header:
        raise MalformedReportError("no header fields recognized")

    report.app_uuid = app_uuid_policy(ctx.images)

    logger.info(
        "Parsed crash log: %d header field(s), %d thread(s), %d image(s)",
        len(report.header), len(report.backtraces), len(report.binary_images),
    )
    return report


def parse_file(path: str, app_uuid_policy: AppUUIDPolicy = first_image_uuid) -> Report:
    """Read a crash log from disk and parse it."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        text = f.read()
    return parse(text, app_uuid_policy=app_uuid_policy)
