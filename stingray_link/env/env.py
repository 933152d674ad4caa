from __future__ import annotations

import os
from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictBool, StrictInt, StrictStr

from .time_parser import TimeParser

PrimaryType = Union[str, int, float, bytes, bool]

MAX_CONNECTIONS = 31
COMPILER_PORT = 14032
INSTANCE_BASE_PORT = 14000


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Env(BaseModel):
    STINGRAY_LINK_TOOLCHAIN_PATH: StrictStr | None = None
    STINGRAY_LINK_SPAWN_OWN_COMPILER: StrictBool = False
    STINGRAY_LINK_HOST: StrictStr = "127.0.0.1"
    STINGRAY_LINK_COMPILER_PORT: StrictInt = COMPILER_PORT
    STINGRAY_LINK_INSTANCE_BASE_PORT: StrictInt = INSTANCE_BASE_PORT
    STINGRAY_LINK_MAX_CONNECTIONS: StrictInt = MAX_CONNECTIONS
    STINGRAY_LINK_IDENTIFY_TIMEOUT: StrictStr = "5s"

    # Compiler connection budgets
    STINGRAY_LINK_COMPILER_ATTACH_ATTEMPTS: StrictInt = 1
    STINGRAY_LINK_COMPILER_SPAWN_ATTEMPTS: StrictInt = 20
    STINGRAY_LINK_COMPILER_RECONNECT_ATTEMPTS: StrictInt = 5
    STINGRAY_LINK_COMPILER_WATCH_ATTEMPTS: StrictInt = 100
    STINGRAY_LINK_COMPILER_RETRY_INTERVAL: StrictStr = "1s"
    STINGRAY_LINK_COMPILER_TARGET_ID: StrictStr = "00000000-1111-2222-3333-444444444444"

    STINGRAY_LINK_SCAN_INTERVAL: StrictStr = "1s"
    STINGRAY_LINK_APP_DATA_DIRECTORY: StrictStr | None = None

    STINGRAY_LINK_LOG_LEVEL: StrictStr = "info"
    STINGRAY_LINK_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    STINGRAY_LINK_LOGS_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "STINGRAY_LINK_TOOLCHAIN_PATH": str,
            "STINGRAY_LINK_SPAWN_OWN_COMPILER": _to_bool,
            "STINGRAY_LINK_HOST": str,
            "STINGRAY_LINK_COMPILER_PORT": int,
            "STINGRAY_LINK_INSTANCE_BASE_PORT": int,
            "STINGRAY_LINK_MAX_CONNECTIONS": int,
            "STINGRAY_LINK_IDENTIFY_TIMEOUT": str,
            "STINGRAY_LINK_COMPILER_ATTACH_ATTEMPTS": int,
            "STINGRAY_LINK_COMPILER_SPAWN_ATTEMPTS": int,
            "STINGRAY_LINK_COMPILER_RECONNECT_ATTEMPTS": int,
            "STINGRAY_LINK_COMPILER_WATCH_ATTEMPTS": int,
            "STINGRAY_LINK_COMPILER_RETRY_INTERVAL": str,
            "STINGRAY_LINK_COMPILER_TARGET_ID": str,
            "STINGRAY_LINK_SCAN_INTERVAL": str,
            "STINGRAY_LINK_APP_DATA_DIRECTORY": str,
            "STINGRAY_LINK_LOG_LEVEL": str,
            "STINGRAY_LINK_LOG_OUTPUT": str,
            "STINGRAY_LINK_LOGS_DIRECTORY": str,
        }

    @property
    def max_connections(self) -> int:
        return max(0, min(self.STINGRAY_LINK_MAX_CONNECTIONS, MAX_CONNECTIONS))

    @property
    def identify_timeout(self) -> float:
        return TimeParser().parse(self.STINGRAY_LINK_IDENTIFY_TIMEOUT)

    @property
    def retry_interval(self) -> float:
        return TimeParser().parse(self.STINGRAY_LINK_COMPILER_RETRY_INTERVAL)

    @property
    def scan_interval(self) -> float:
        return TimeParser().parse(self.STINGRAY_LINK_SCAN_INTERVAL)

    @property
    def app_data_directory(self) -> str | None:
        if self.STINGRAY_LINK_APP_DATA_DIRECTORY:
            return self.STINGRAY_LINK_APP_DATA_DIRECTORY

        return os.environ.get("LOCALAPPDATA")
