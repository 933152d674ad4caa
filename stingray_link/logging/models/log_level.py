from __future__ import annotations
from enum import Enum
from typing import Literal

LogLevelName = Literal[
    'trace',
    'debug',
    'info',
    'warn',
    'error',
    'critical',
    'fatal'
]


class LogLevel(Enum):
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    FATAL = 'FATAL'

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def to_level(cls, level_name: LogLevelName | str) -> LogLevel:
        levels_map = {
            level.value: level for level in cls
        }

        # "warning" is accepted as an alias of "warn".
        name = level_name.upper()
        if name == "WARNING":
            name = LogLevel.WARN.value

        return levels_map.get(name, LogLevel.INFO)


_SEVERITY = {
    level: severity for severity, level in enumerate(LogLevel)
}
