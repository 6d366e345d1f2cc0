"""
crashlog-notifier
Parses platform crash logs and uploads them to a crash-aggregation endpoint.
"""
__version__ = "1.0.0"
