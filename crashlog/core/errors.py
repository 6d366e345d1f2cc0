"""
Errors
======
Terminal failure kinds for a single parse-format-send cycle.
None of these are retried internally.
"""
from typing import Optional


class CrashlogError(Exception):
    """Base class for every failure raised by the pipeline."""


class MalformedReportError(CrashlogError):
    """The crash log has no recognizable sections, or a line breaks the section order."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class FormatError(CrashlogError):
    """A header field required by the payload is missing or unreadable."""

    def __init__(self, field: str, reason: str = "missing") -> None:
        super().__init__(f"header field '{field}' is {reason}")
        self.field = field


class DeliveryError(CrashlogError):
    """The endpoint did not accept the payload, or could not be reached."""

    def __init__(self, status_code: Optional[int] = None) -> None:
        super().__init__("send failed")
        self.status_code = status_code
