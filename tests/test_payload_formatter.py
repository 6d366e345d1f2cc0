"""
Unit Tests — Payload Formatter
==============================
Field mapping, metadata bucket, frame resolution against binary images,
pc/lr marking, crashed-thread selection and required-field failures.
"""
import pytest

from crashlog.core.errors import FormatError
from crashlog.core.payload_formatter import (
    PayloadFormatter,
    normalize_timestamp,
    split_os_version,
)
from crashlog.models.report import Backtrace, Frame, Report
from crashlog.parser.crash_parser import parse


@pytest.fixture
def formatter(notifier):
    return PayloadFormatter(notifier)


@pytest.fixture
def event(formatter, sample_log):
    return formatter.format(parse(sample_log))["events"][0]


def _report(backtraces, **header):
    base = {"OS Version": "iPhone OS 13.3 (17C54)", "Date/Time": "2020-01-01 00:00:00.000 +0000"}
    base.update(header)
    return Report(header=base, backtraces=backtraces)


def _backtrace(index, crashed=False, address="0x1"):
    return Backtrace(
        index=index,
        crashed=crashed,
        stacktrace=[Frame(frame_address=address, macho_file="MyApp", method="main")],
    )


# ---------------------------------------------------------------------------
# 1. Top-level shape
# ---------------------------------------------------------------------------
class TestEnvelope:

    def test_notifier_block(self, formatter, sample_log):
        payload = formatter.format(parse(sample_log))
        assert payload["notifier"] == {
            "name": "crashlog-notifier",
            "url": "https://example.com/notifier",
            "version": "9.9.9",
        }
        assert len(payload["events"]) == 1

    def test_fixed_severity_fields(self, event):
        assert event["unhandled"] is True
        assert event["severity"] == "error"
        assert event["severityReason"] == {"type": "unhandledException"}


# ---------------------------------------------------------------------------
# 2. App / device
# ---------------------------------------------------------------------------
class TestAppAndDevice:

    def test_app(self, event):
        assert event["app"] == {
            "id": "com.example.MyApp",
            "version": "1.2.3 (45)",
            "inForeground": True,
            "dsymUUIDs": ["AABBCCDD-1122-3344-AABB-CCDD11223344"],
        }

    def test_device(self, event):
        assert event["device"] == {
            "id": "abc123def456",
            "model": "iPhone12,1",
            "osName": "iPhone OS",
            "osVersion": "13.3.1",
            "time": "2020-03-04T10:11:12.345+01:00",
        }

    def test_background_role(self, formatter):
        payload = formatter.format(_report([_backtrace("0", crashed=True)], Role="Background"))
        assert payload["events"][0]["app"]["inForeground"] is False

    def test_dsym_uuids_without_images(self, formatter):
        payload = formatter.format(_report([_backtrace("0", crashed=True)]))
        assert payload["events"][0]["app"]["dsymUUIDs"] == [None]


# ---------------------------------------------------------------------------
# 3. Metadata bucket
# ---------------------------------------------------------------------------
class TestMetadata:

    MAPPED = (
        "Version", "Identifier", "CrashReporter Key", "Hardware Model",
        "Exception Type", "Termination Reason", "OS Version", "Date/Time",
    )

    def test_mapped_keys_not_in_metadata(self, event):
        metadata = event["metaData"]["report"]
        for key in self.MAPPED:
            assert key not in metadata

    def test_other_keys_carried_verbatim(self, event, sample_log):
        metadata = event["metaData"]["report"]
        header = parse(sample_log).header
        expected = {k: v for k, v in header.items() if k not in self.MAPPED}
        assert metadata == expected
        assert metadata["Role"] == "Foreground"
        assert metadata["Triggered by Thread"] == "0"

    def test_report_header_not_mutated(self, formatter, sample_log):
        report = parse(sample_log)
        before = dict(report.header)
        formatter.format(report)
        formatter.format(report)
        assert report.header == before


# ---------------------------------------------------------------------------
# 4. Exception + threads
# ---------------------------------------------------------------------------
class TestExceptionAndThreads:

    def test_exception_fields(self, event):
        exception = event["exceptions"][0]
        assert exception["errorClass"] == "EXC_CRASH (SIGABRT)"
        assert exception["message"] == "Namespace SIGNAL, Code 0x6"
        assert len(exception["stacktrace"]) == 3

    def test_crashed_thread_excluded_from_threads(self, event):
        assert [t["id"] for t in event["threads"]] == ["1", "2"]
        assert all("crashed" not in t for t in event["threads"])

    def test_thread_names(self, event):
        assert "name" not in event["threads"][0]
        assert event["threads"][1]["name"] == "com.apple.uikit.eventfetch-thread"

    def test_resolved_frame(self, event):
        frame = event["exceptions"][0]["stacktrace"][0]
        assert frame["machoFile"] == "/usr/lib/system/libsystem_kernel.dylib"
        assert frame["machoUUID"] == "0A6E4D1B-7D4A-3C1E-9D3C-6A8B2F1E4D5C"
        assert frame["machoLoadAddress"] == "0x1b7a16000"

    def test_unresolved_frame_keeps_raw_name(self, event):
        frame = event["threads"][1]["stacktrace"][1]
        assert frame["machoFile"] == "Foundation"
        assert "machoUUID" not in frame
        assert "machoLoadAddress" not in frame

    def test_pc_and_lr_marked_on_exception_only(self, event):
        stacktrace = event["exceptions"][0]["stacktrace"]
        assert [f["isPC"] for f in stacktrace] == [True, False, False]
        assert [f["isLR"] for f in stacktrace] == [False, True, False]
        for thread in event["threads"]:
            for frame in thread["stacktrace"]:
                assert "isPC" not in frame
                assert "isLR" not in frame

    def test_report_frames_not_mutated(self, formatter, sample_log):
        report = parse(sample_log)
        formatter.format(report)
        frame = report.backtraces[0].stacktrace[0]
        assert frame.macho_file == "libsystem_kernel.dylib"
        assert frame.macho_uuid is None
        assert frame.is_pc is None

    def test_address_comparison_ignores_padding(self, formatter):
        report = _report([_backtrace("0", crashed=True, address="0x0000000100000000")])
        report.program_counter = "0x100000000"
        frame = formatter.format(report)["events"][0]["exceptions"][0]["stacktrace"][0]
        assert frame["isPC"] is True
        assert frame["isLR"] is False

    def test_multiple_crashed_uses_first(self, formatter):
        report = _report([
            _backtrace("0"),
            _backtrace("1", crashed=True, address="0x11"),
            _backtrace("2", crashed=True, address="0x22"),
        ])
        event = formatter.format(report)["events"][0]
        assert event["exceptions"][0]["stacktrace"][0]["frameAddress"] == "0x11"
        assert [t["id"] for t in event["threads"]] == ["0", "2"]

    def test_no_crashed_thread(self, formatter):
        report = _report([_backtrace("0"), _backtrace("1")])
        event = formatter.format(report)["events"][0]
        assert event["exceptions"][0]["stacktrace"] == []
        assert len(event["threads"]) == 2


# ---------------------------------------------------------------------------
# 5. Required header fields
# ---------------------------------------------------------------------------
class TestRequiredFields:

    def test_missing_os_version(self, formatter):
        report = Report(header={"Date/Time": "2020-01-01 00:00:00.000 +0000"})
        with pytest.raises(FormatError) as exc:
            formatter.format(report)
        assert exc.value.field == "OS Version"

    def test_missing_date_time(self, formatter):
        report = Report(header={"OS Version": "iPhone OS 13.3 (17C54)"})
        with pytest.raises(FormatError) as exc:
            formatter.format(report)
        assert exc.value.field == "Date/Time"

    def test_unreadable_date(self, formatter):
        report = _report([], **{"Date/Time": "yesterday"})
        with pytest.raises(FormatError):
            formatter.format(report)


class TestFieldHelpers:

    @pytest.mark.parametrize("value, expected", [
        ("iPhone OS 13.3.1 (17D50)", ("iPhone OS", "13.3.1")),
        ("iOS 16.1", ("iOS", "16.1")),
        ("Mac OS X 10.15.7 (19H2)", ("Mac OS X", "10.15.7")),
    ])
    def test_split_os_version(self, value, expected):
        assert split_os_version(value) == expected

    def test_split_os_version_without_number(self):
        with pytest.raises(FormatError):
            split_os_version("iPhone OS")

    def test_normalize_timestamp(self):
        assert normalize_timestamp("2021-01-02 03:04:05.678 +0000") == "2021-01-02T03:04:05.678+00:00"
        assert normalize_timestamp("2021-01-02 03:04:05.6 -0530") == "2021-01-02T03:04:05.600-05:30"


# ---------------------------------------------------------------------------
# 6. End-to-end
# ---------------------------------------------------------------------------
def test_minimal_log_end_to_end(formatter, minimal_log):
    event = formatter.format(parse(minimal_log))["events"][0]
    assert event["app"]["version"] == "1.2.3 (45)"
    assert event["app"]["dsymUUIDs"] == ["AABBCCDD-1122-3344-AABB-CCDD11223344"]
    assert event["threads"] == []

    stacktrace = event["exceptions"][0]["stacktrace"]
    assert len(stacktrace) == 1
    assert stacktrace[0]["isPC"] is True
    assert stacktrace[0]["machoFile"] == "/Applications/MyApp.app/MyApp"
