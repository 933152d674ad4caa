import asyncio
import datetime
import io
import os
import pathlib
import sys
import threading
from collections import defaultdict
from typing import (
    Callable,
    Dict,
    TypeVar,
)

import msgspec

from stingray_link.logging.config import LoggingConfig, StreamType
from stingray_link.logging.models import Entry, Log


T = TypeVar('T', bound=Entry)

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"


class LoggerStream:
    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ) -> None:
        if name is None:
            name = "default"

        self._name = name
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

        self._files: Dict[str, io.BufferedWriter] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._default_logfile_path: str | None = None

        self._config = LoggingConfig()
        self._initialized: bool = False
        self._closed = False

    @property
    def name(self):
        return self._name

    async def initialize(self):
        async with self._init_lock:
            if self._initialized:
                return

            self._loop = asyncio.get_running_loop()

            if self._default_log_directory is None:
                self._default_log_directory = self._config.directory

            self._initialized = True
            self._closed = False

    async def open_file(
        self,
        filename: str,
        directory: str | None = None,
        is_default: bool = False,
    ):
        if self._loop is None:
            await self.initialize()

        logfile_path = self._to_logfile_path(filename, directory=directory)

        file_lock = self._file_locks[logfile_path]
        async with file_lock:
            await self._loop.run_in_executor(
                None,
                self._open_file,
                logfile_path,
            )

        if is_default:
            self._default_logfile_path = logfile_path

        return logfile_path

    def _open_file(self, logfile_path: str):
        resolved_path = pathlib.Path(logfile_path).absolute().resolve()
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

        self._files[logfile_path] = open(resolved_path, "ab+")

    def _to_logfile_path(
        self,
        filename: str,
        directory: str | None = None,
    ):
        if directory is None:
            directory = os.path.join(os.getcwd(), "logs")

        return os.path.join(directory, filename)

    async def close(self):
        self._closed = True

        for logfile_path in list(self._files.keys()):
            file_lock = self._file_locks[logfile_path]
            async with file_lock:
                logfile = self._files.pop(logfile_path)
                if logfile.closed is False:
                    await self._loop.run_in_executor(None, logfile.close)

        self._initialized = False

    async def log(
        self,
        entry: T | Log[T],
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        filename: str | None = None
        directory: str | None = None

        if path:
            logfile_path = pathlib.Path(path)
            is_logfile = len(logfile_path.suffix) > 0

            filename = logfile_path.name if is_logfile else None
            directory = str(logfile_path.parent.absolute()) if is_logfile else str(logfile_path.absolute())

        if template is None:
            template = self._default_template

        if filename is None:
            filename = self._default_logfile

        if directory is None and filename:
            directory = self._default_log_directory

        if self._initialized is False:
            await self.initialize()

        if filename:
            await self._log_to_file(
                entry,
                filename=filename,
                directory=directory,
                filter=filter,
            )

        else:
            await self._log(
                entry,
                template=template,
                filter=filter,
            )

    async def _log(
        self,
        entry_or_log: T | Log[T],
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if isinstance(entry_or_log, Log):
            entry = entry_or_log.entry

        else:
            entry = entry_or_log

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if template is None:
            template = DEFAULT_TEMPLATE

        if isinstance(entry_or_log, Log):
            log_file = entry_or_log.filename
            line_number = entry_or_log.line_number
            function_name = entry_or_log.function_name

        else:
            log_file, line_number, function_name = self._find_caller()

        stream = sys.stdout if self._config.output == StreamType.STDOUT else sys.stderr
        context = {
            "filename": log_file,
            "function_name": function_name,
            "line_number": line_number,
            "thread_id": threading.get_native_id(),
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }

        try:
            stream.write(entry.to_template(template, context=context) + "\n")
            stream.flush()

        except Exception as err:
            self._write_error(entry, context, err)

    async def _log_to_file(
        self,
        entry_or_log: T | Log[T],
        filename: str,
        directory: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if isinstance(entry_or_log, Log):
            entry = entry_or_log.entry

        else:
            entry = entry_or_log

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        logfile_path = self._to_logfile_path(filename, directory=directory)
        if self._files.get(logfile_path) is None or self._files[logfile_path].closed:
            await self.open_file(
                filename,
                directory=directory,
            )

        if isinstance(entry_or_log, Log):
            log = entry_or_log

        else:
            log_file, line_number, function_name = self._find_caller()
            log = Log(
                entry=entry,
                logger_name=self._name,
                filename=log_file,
                function_name=function_name,
                line_number=line_number,
            )

        file_lock = self._file_locks[logfile_path]

        try:
            async with file_lock:
                await self._loop.run_in_executor(
                    None,
                    self._write_to_file,
                    log,
                    logfile_path,
                )

        except Exception as err:
            self._write_error(
                entry,
                {
                    "filename": log.filename,
                    "function_name": log.function_name,
                    "line_number": log.line_number,
                    "thread_id": log.thread_id,
                    "timestamp": log.timestamp,
                },
                err,
            )

    def _write_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        if (
            logfile := self._files.get(logfile_path)
        ) and (
            logfile.closed is False
        ):
            logfile.write(msgspec.json.encode(log) + b"\n")
            logfile.flush()

    def _write_error(
        self,
        entry: Entry,
        context: dict,
        err: Exception,
    ):
        try:
            sys.__stderr__.write(
                entry.to_template(
                    ERROR_TEMPLATE,
                    context={
                        **context,
                        "error": str(err),
                    },
                ) + "\n"
            )

        except Exception:
            pass

    def _find_caller(self):
        """
        Find the stack frame of the caller so that we can note the source
        file name, line number and function name.
        """
        try:
            frame = sys._getframe(4)

        except ValueError:
            return ("<unknown>", 0, "<unknown>")

        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )
