from __future__ import annotations

import datetime
import io
import pathlib
import re

from stingray_link.events import Multicast


def get_timestamp() -> str:
    return datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]


class OutputSink:
    """
    Persistent, append-only log view for one logical endpoint.

    Lines are kept in memory and, when a directory is given, mirrored to
    ``<directory>/<name>.log``.
    """

    def __init__(
        self,
        name: str,
        directory: str | None = None,
        max_lines: int | None = None,
    ) -> None:
        self.name = name
        self.lines: list[str] = []
        self.on_line = Multicast()
        self.on_show = Multicast()

        self._max_lines = max_lines
        self._file: io.TextIOWrapper | None = None
        self._path: pathlib.Path | None = None

        if directory:
            slug = re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_") or "output"
            self._path = pathlib.Path(directory) / f"{slug}.log"

    def __repr__(self) -> str:
        return f"OutputSink({self.name!r}, {len(self.lines)} lines)"

    @property
    def path(self) -> pathlib.Path | None:
        return self._path

    def append_line(self, line: str = ""):
        self.lines.append(line)
        if self._max_lines and len(self.lines) > self._max_lines:
            del self.lines[: len(self.lines) - self._max_lines]

        if self._path is not None:
            self._write(line)

        self.on_line.fire(line)

    def append_entry(self, level: str, message: str, system: str | None = None):
        if system:
            self.append_line(f"{get_timestamp()}  [{level}][{system}] {message}")

        else:
            self.append_line(f"{get_timestamp()}  [{level}] {message}")

    def append_separator(self):
        timestamp = get_timestamp()
        self.append_line()
        self.append_line(f"{timestamp}  [info] ===========================================")
        self.append_line(f"{timestamp}  [info] =================NEW LOG===================")
        self.append_line(f"{timestamp}  [info] ===========================================")
        self.append_line()

    def show(self, preserve_focus: bool = False):
        self.on_show.fire(preserve_focus)

    def close(self):
        if self._file is not None and self._file.closed is False:
            self._file.close()

        self._file = None

    def _write(self, line: str):
        if self._file is None or self._file.closed:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self._path, "a", encoding="utf-8")

        self._file.write(line + "\n")
        self._file.flush()
