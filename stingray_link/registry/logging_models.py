from stingray_link.logging.models import Entry, LogLevel


class RegistryDebug(Entry, kw_only=True):
    port: int
    level: LogLevel = LogLevel.DEBUG


class RegistryInfo(Entry, kw_only=True):
    port: int
    level: LogLevel = LogLevel.INFO


class ScannerDebug(Entry, kw_only=True):
    level: LogLevel = LogLevel.DEBUG


class ScannerError(Entry, kw_only=True):
    level: LogLevel = LogLevel.ERROR
