from typing import Any

import msgspec


class IdentifyInfo(msgspec.Struct, kw_only=True, omit_defaults=True):
    argv: list[Any] | dict[str, Any] | None = None
    build: str | None = None
    build_identifier: str | None = None
    bundled: bool | None = None
    console_port: int | None = None
    process_id: int | None = None
    session_id: str | None = None
    platform: str | None = None
    time_since_launch: float | None = None
    jit: list[Any] | dict[str, Any] | None = None


class IdentifyResponse(msgspec.Struct, kw_only=True):
    info: IdentifyInfo | None = None


class LogMessage(msgspec.Struct, kw_only=True):
    level: str = "info"
    message: str = ""
    system: str | None = None
    lua_callstack: str | None = None
    error_context: str | None = None
    message_type: str | None = None

    @property
    def is_lua_error(self) -> bool:
        return self.message_type == "lua_error"


class CompilerEvent(msgspec.Struct, kw_only=True):
    id: str | None = None
    start: Any = None
    finished: Any = None
    status: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class CompileProgress(msgspec.Struct, kw_only=True):
    i: int | None = None
    count: int | None = None
    file: str | None = None
    done: bool = False
    status: str | None = None
