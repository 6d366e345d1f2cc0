"""
Constants
Header keys, severity fields and wire header names shared by the formatter and delivery.
"""
# Header keys mapped into named payload fields (removed from metaData)
KEY_VERSION = "Version"
KEY_IDENTIFIER = "Identifier"
KEY_CRASH_REPORTER = "CrashReporter Key"
KEY_HARDWARE_MODEL = "Hardware Model"
KEY_EXCEPTION_TYPE = "Exception Type"
KEY_TERMINATION_REASON = "Termination Reason"
KEY_OS_VERSION = "OS Version"
KEY_DATE_TIME = "Date/Time"

# Read but left in metaData
KEY_ROLE = "Role"
ROLE_FOREGROUND = "Foreground"

MAPPED_HEADER_KEYS = frozenset({
    KEY_VERSION,
    KEY_IDENTIFIER,
    KEY_CRASH_REPORTER,
    KEY_HARDWARE_MODEL,
    KEY_EXCEPTION_TYPE,
    KEY_TERMINATION_REASON,
    KEY_OS_VERSION,
    KEY_DATE_TIME,
})

DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%f %z"

SEVERITY = "error"
SEVERITY_REASON = {"type": "unhandledException"}
STACKTRACE_TYPE = "cocoa"
METADATA_NAMESPACE = "report"

API_KEY_HEADER = "Bugsnag-Api-Key"
PAYLOAD_VERSION_HEADER = "Bugsnag-Payload-Version"
PAYLOAD_VERSION = "4.0"
