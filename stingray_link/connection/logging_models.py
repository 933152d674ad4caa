"""
Logging models for console connections and the connection registry.
"""

from stingray_link.logging.models import Entry, LogLevel


class ConsoleTrace(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.TRACE


class ConsoleDebug(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.DEBUG


class ConsoleInfo(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.INFO


class ConsoleError(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.ERROR
