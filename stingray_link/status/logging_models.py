from stingray_link.logging.models import Entry, LogLevel


class CompilerStatusInfo(Entry, kw_only=True):
    status: str
    level: LogLevel = LogLevel.INFO
