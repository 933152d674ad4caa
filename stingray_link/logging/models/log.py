import datetime
import threading
from typing import Generic, TypeVar

import msgspec

from .entry import Entry


T = TypeVar('T')


def _utc_timestamp() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class Log(msgspec.Struct, Generic[T], kw_only=True):
    """
    File record for one entry: the entry itself plus the logger that
    wrote it and the call site that produced it.
    """
    entry: Entry
    logger_name: str | None = None
    filename: str
    function_name: str
    line_number: int
    thread_id: int = msgspec.field(default_factory=threading.get_native_id)
    timestamp: str = msgspec.field(default_factory=_utc_timestamp)
