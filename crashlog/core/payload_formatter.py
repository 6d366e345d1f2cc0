"""
Payload Formatter
=================
Maps a parsed Report into the crash-aggregation event payload.

DETERMINISM CONTRACT:
  - Pure: never performs I/O, never reads environment variables.
  - Never mutates the Report. Header fields are read into named values and
    the metadata bucket is computed as "header minus mapped keys".
  - Same Report + same NotifierInfo always yields the same payload.

Payload shape:
    {
      "notifier": {"name", "url", "version"},
      "events": [{
        "exceptions": [{"errorClass", "message", "type", "stacktrace"}],
        "unhandled": true,
        "severity": "error",
        "severityReason": {"type": "unhandledException"},
        "threads": [{"id", "name", "type", "stacktrace"}, ...],
        "app": {"id", "version", "inForeground", "dsymUUIDs"},
        "device": {"id", "model", "osName", "osVersion", "time"},
        "metaData": {"report": {<unmapped header fields>}}
      }]
    }
"""
import logging
import re
from datetime import datetime
from typing import Any, Optional

from crashlog.core import constants as C
from crashlog.core.errors import FormatError
from crashlog.core.notifier import NotifierInfo
from crashlog.models.report import Backtrace, BinaryImage, Frame, Report, image_key

logger = logging.getLogger(__name__)

# "iPhone OS 13.3.1 (17D50)" -> ("iPhone OS", "13.3.1")
_OS_VERSION = re.compile(r"^(.*?)\s+(\d+(?:\.\d+)*)")


# ---------------------------------------------------------------------------
# Field Helpers
# ---------------------------------------------------------------------------
def _require(header: dict[str, str], key: str) -> str:
    value = header.get(key)
    if value is None or not value.strip():
        raise FormatError(key)
    return value


def split_os_version(value: str) -> tuple[str, str]:
    """Split an "OS Version" header value into (osName, osVersion)."""
    match = _OS_VERSION.match(value.strip())
    if not match or not match.group(1):
        raise FormatError(C.KEY_OS_VERSION, reason=f"unreadable ({value!r})")
    return match.group(1), match.group(2)


def normalize_timestamp(value: str) -> str:
    """
    Re-emit a "Date/Time" header value as ISO-8601 with milliseconds.

    "2020-03-04 10:11:12.345 +0100" -> "2020-03-04T10:11:12.345+01:00"
    """
    try:
        moment = datetime.strptime(value.strip(), C.DATE_FORMAT)
    except ValueError as e:
        raise FormatError(C.KEY_DATE_TIME, reason=f"unreadable ({value!r})") from e
    return moment.isoformat(timespec="milliseconds")


def _same_address(left: str, right: Optional[str]) -> bool:
    if right is None:
        return False
    try:
        return int(left, 16) == int(right, 16)
    except ValueError:
        return left == right


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------
class PayloadFormatter:
    """
    Builds event payloads for one notifier identity.

    Usage:
        formatter = PayloadFormatter(NotifierInfo(name=..., url=..., version=...))
        payload = formatter.format(report)
    """

    def __init__(self, notifier: NotifierInfo) -> None:
        self.notifier = notifier

    # -- frames ------------------------------------------------------------
    def _resolve_frame(
        self,
        frame: Frame,
        images: dict[str, BinaryImage],
        report: Report,
        mark_registers: bool,
    ) -> dict[str, Any]:
        update: dict[str, Any] = {}
        image = images.get(image_key(frame.macho_file))
        if image is not None:
            update["macho_file"] = image.path
            update["macho_uuid"] = image.uuid
            update["macho_load_address"] = image.addr

        if mark_registers:
            update["is_pc"] = _same_address(frame.frame_address, report.program_counter)
            update["is_lr"] = _same_address(frame.frame_address, report.link_register)

        return frame.model_copy(update=update).to_payload()

    def _stacktrace(self, backtrace: Backtrace, report: Report, crashed: bool) -> list[dict[str, Any]]:
        return [
            self._resolve_frame(frame, report.binary_images, report, mark_registers=crashed)
            for frame in backtrace.stacktrace
        ]

    def _split_backtraces(self, report: Report) -> tuple[Optional[Backtrace], list[Backtrace]]:
        """Pick the first crashed backtrace; every other one is an ordinary thread."""
        crashed = [bt for bt in report.backtraces if bt.crashed]
        if len(crashed) != 1:
            logger.warning(
                "Expected exactly one crashed thread, found %d; using the first", len(crashed)
            )
        if not crashed:
            return None, list(report.backtraces)

        primary = crashed[0]
        others = [bt for bt in report.backtraces if bt is not primary]
        return primary, others

    def _thread(self, backtrace: Backtrace, report: Report) -> dict[str, Any]:
        thread: dict[str, Any] = {"id": backtrace.index}
        if backtrace.name:
            thread["name"] = backtrace.name
        thread["type"] = C.STACKTRACE_TYPE
        thread["stacktrace"] = self._stacktrace(backtrace, report, crashed=False)
        return thread

    # -- public ------------------------------------------------------------
    def format(self, report: Report) -> dict[str, Any]:
        """
        Build the payload for ``report``.

        Raises
        ------
        FormatError
            "OS Version" or "Date/Time" is missing or unreadable.
        """
        header = dict(report.header)

        os_name, os_version = split_os_version(_require(header, C.KEY_OS_VERSION))
        timestamp = normalize_timestamp(_require(header, C.KEY_DATE_TIME))

        metadata = {
            key: value for key, value in header.items()
            if key not in C.MAPPED_HEADER_KEYS
        }

        primary, others = self._split_backtraces(report)
        exception = {
            "errorClass": header.get(C.KEY_EXCEPTION_TYPE),
            "message": header.get(C.KEY_TERMINATION_REASON),
            "type": C.STACKTRACE_TYPE,
            "stacktrace": self._stacktrace(primary, report, crashed=True) if primary else [],
        }

        event = {
            "exceptions": [exception],
            "unhandled": True,
            "severity": C.SEVERITY,
            "severityReason": dict(C.SEVERITY_REASON),
            "threads": [self._thread(bt, report) for bt in others],
            "app": {
                "id": header.get(C.KEY_IDENTIFIER),
                "version": header.get(C.KEY_VERSION),
                "inForeground": header.get(C.KEY_ROLE) == C.ROLE_FOREGROUND,
                "dsymUUIDs": [report.app_uuid],
            },
            "device": {
                "id": header.get(C.KEY_CRASH_REPORTER),
                "model": header.get(C.KEY_HARDWARE_MODEL),
                "osName": os_name,
                "osVersion": os_version,
                "time": timestamp,
            },
            "metaData": {C.METADATA_NAMESPACE: metadata},
        }

        return {
            "notifier": self.notifier.model_dump(),
            "events": [event],
        }


def format_report(report: Report, notifier: Optional[NotifierInfo] = None) -> dict[str, Any]:
    """Convenience wrapper using the configured notifier identity."""
    return PayloadFormatter(notifier or NotifierInfo.from_config()).format(report)
