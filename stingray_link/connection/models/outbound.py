import uuid
from typing import Any

from .frames import Frame


def command_frame(command: str, *args: Any, command_id: str | None = None) -> Frame:
    if command_id is None:
        command_id = str(uuid.uuid4())

    return {
        "id": command_id,
        "type": "command",
        "command": command,
        "arg": [*args],
    }


def debugger_frame(command: str, data: dict[str, Any] | None = None) -> Frame:
    frame: Frame = {
        "type": "lua_debugger",
        "command": command,
    }

    if data:
        frame.update(data)

    return frame


def script_frame(script: str) -> Frame:
    return {
        "type": "script",
        "script": script,
    }


def cancel_frame(request_id: str) -> Frame:
    return {
        "id": request_id,
        "type": "cancel",
    }
