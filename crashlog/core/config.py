"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    CRASHLOG_ENDPOINT   — Crash-aggregation endpoint (default: https://notify.bugsnag.com)
    CRASHLOG_API_KEY    — Default API key for the HTTP relay when a request carries none
    NOTIFIER_NAME       — Notifier identity name sent with every payload
    NOTIFIER_URL        — Notifier homepage sent with every payload
    NOTIFIER_VERSION    — Notifier version (default: package version)
    LOG_LEVEL           — Root log level (default: INFO)
    LOG_DIR             — Directory for the daily log file (default: logs)

These values are read here only. The formatter and the delivery client
receive them through their constructors.
"""
import os
from dotenv import load_dotenv

from crashlog import __version__

load_dotenv()

CRASHLOG_ENDPOINT = os.getenv("CRASHLOG_ENDPOINT", "https://notify.bugsnag.com")
CRASHLOG_API_KEY = os.getenv("CRASHLOG_API_KEY")

# Notifier identity block
NOTIFIER_NAME = os.getenv("NOTIFIER_NAME", "crashlog-notifier")
NOTIFIER_URL = os.getenv("NOTIFIER_URL", "https://github.com/crashlog-notifier/crashlog-notifier")
NOTIFIER_VERSION = os.getenv("NOTIFIER_VERSION", __version__)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")
