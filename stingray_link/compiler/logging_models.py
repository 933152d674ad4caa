from stingray_link.logging.models import Entry, LogLevel


class CompilerDebug(Entry, kw_only=True):
    level: LogLevel = LogLevel.DEBUG


class CompilerInfo(Entry, kw_only=True):
    level: LogLevel = LogLevel.INFO


class CompilerWarn(Entry, kw_only=True):
    pid: int | None = None
    level: LogLevel = LogLevel.WARN


class CompilerError(Entry, kw_only=True):
    exit_code: int | None = None
    level: LogLevel = LogLevel.ERROR


class CompileJobInfo(Entry, kw_only=True):
    job_id: str
    level: LogLevel = LogLevel.INFO
