from __future__ import annotations

from typing import Any, Dict

import msgspec
import orjson

from .inbound import (
    CompileProgress,
    CompilerEvent,
    IdentifyInfo,
    IdentifyResponse,
    LogMessage,
)


Frame = Dict[str, Any]

IDENTIFY = "stingray_identify"
MESSAGE = "message"
COMPILER = "compiler"
COMPILE_PROGRESS = "compile_progress"

_frame_models: dict[str, type[msgspec.Struct]] = {
    IDENTIFY: IdentifyResponse,
    MESSAGE: LogMessage,
    COMPILER: CompilerEvent,
    COMPILE_PROGRESS: CompileProgress,
}


def strip_padding(data: str) -> str:
    # Console servers write into fixed size buffers.
    return data.rstrip("\0")


def decode_frame(data: str) -> Frame | None:
    """
    Decode a text frame into a JSON object.

    Returns None for anything that is not a JSON object, including
    frames that fail to parse.
    """
    try:
        frame = orjson.loads(strip_padding(data))

    except orjson.JSONDecodeError:
        return None

    if not isinstance(frame, dict):
        return None

    return frame


def encode_frame(frame: Frame) -> str:
    return orjson.dumps(frame).decode()


def parse_frame(frame: Frame) -> msgspec.Struct | None:
    """
    Convert a decoded frame into its typed model.

    Unknown ``type`` values return None. Fields with unexpected types are
    dropped rather than failing the whole frame.
    """
    model = _frame_models.get(frame.get("type"))
    if model is None:
        return None

    if model is IdentifyResponse:
        return IdentifyResponse(
            info=parse_identify_info(frame.get("info")),
        )

    return _convert_lenient(frame, model)


def parse_identify_info(info: Any) -> IdentifyInfo | None:
    if not isinstance(info, dict):
        return None

    return _convert_lenient(info, IdentifyInfo)


def _convert_lenient(data: Frame, model: type[msgspec.Struct]):
    fields = {
        name: value
        for name, value in data.items()
        if name in model.__struct_fields__
    }

    try:
        return msgspec.convert(fields, model, strict=False)

    except msgspec.ValidationError:
        pass

    accepted: dict[str, Any] = {}
    for name, value in fields.items():
        try:
            msgspec.convert({**accepted, name: value}, model, strict=False)
            accepted[name] = value

        except msgspec.ValidationError:
            continue

    return msgspec.convert(accepted, model, strict=False)
