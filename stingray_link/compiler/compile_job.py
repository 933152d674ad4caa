from __future__ import annotations

import asyncio
import os
import uuid
from enum import Enum

from stingray_link.connection import StingrayConnection
from stingray_link.connection.models import (
    CompileProgress,
    CompilerEvent,
    Frame,
    LogMessage,
    cancel_frame,
    parse_frame,
)
from stingray_link.errors import ToolchainConfigError
from stingray_link.events import Multicast, OneShot
from stingray_link.logging import Logger
from stingray_link.toolchain import Toolchain
from stingray_link.toolchain.models import Project

from .logging_models import CompileJobInfo


DESTINATION_PLATFORM = "win32"


class CompileResult(Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    DISCONNECTED = "DISCONNECTED"
    CANCELLED = "CANCELLED"


def bundle_directory(project: Project, platform: str) -> str:
    if platform != "win32":
        name = f"{platform}_bundled"

    else:
        name = f"win32_{platform}_bundled"

    return os.path.join(project.DataDirectoryBase or "", name)


def build_compile_request(
    project: Project,
    platform: str,
    bundle: bool = False,
    request_id: str | None = None,
) -> Frame:
    if request_id is None:
        request_id = str(uuid.uuid4())

    request: Frame = {
        "id": request_id,
        "type": "compile",
        "source-directory": project.SourceDirectory,
        "source-directory-maps": [
            {
                "directory": os.path.basename(folder),
                "root": os.path.dirname(folder),
            }
            for folder in project.MappedFolders
        ],
        "data-directory": os.path.join(project.DataDirectoryBase or "", platform),
        "source-platform": platform,
        "destination-platform": DESTINATION_PLATFORM,
    }

    if bundle:
        request["bundle-directory"] = bundle_directory(project, platform)

    return request


class CompileJob:
    """
    A single compile request sent to the compile server.

    The job resolves exactly once: with the server's verdict when a
    ``finished`` frame for its id arrives, with DISCONNECTED if the
    compiler goes away first, or with CANCELLED after ``cancel()``.
    """

    logger_name = "stingray_link.compiler"

    def __init__(
        self,
        compiler: StingrayConnection,
        request: Frame,
        logger: Logger | None = None,
    ) -> None:
        self.id: str = request["id"]
        self.request = request
        self.compiler = compiler
        self.started = False
        self.in_progress = False

        self.on_progress = Multicast()
        self.on_message = Multicast()

        self._logger = logger
        self._result: OneShot[CompileResult] = OneShot()

    @classmethod
    async def for_toolchain(
        cls,
        compiler: StingrayConnection,
        toolchain: Toolchain,
        platform: str,
        bundle: bool = False,
        logger: Logger | None = None,
    ) -> CompileJob:
        config = await toolchain.config()

        project = config.current_project
        if project is None:
            raise ToolchainConfigError(
                f"Toolchain {toolchain.path} has no project at index {config.ProjectIndex}"
            )

        return cls(
            compiler,
            build_compile_request(project, platform, bundle=bundle),
            logger=logger,
        )

    @property
    def done(self) -> bool:
        return self._result.resolved

    def start(self) -> bool:
        if self.in_progress or self.done:
            return False

        if not self.compiler.is_ready:
            self._finish(CompileResult.DISCONNECTED)
            return False

        self.compiler.on_receive_data.add(self._on_data)
        self.compiler.on_disconnect.add(self._on_disconnect)

        self.in_progress = True
        self.compiler.send_json(self.request)

        self._schedule_log(f"Compilation requested with id {self.id}")

        return True

    async def wait(self, timeout: float | None = None) -> CompileResult:
        return await self._result.wait(timeout=timeout)

    async def run(self, timeout: float | None = None) -> CompileResult:
        self.start()

        try:
            return await self.wait(timeout=timeout)

        except asyncio.TimeoutError:
            self.cancel()
            raise

    def cancel(self):
        if self.in_progress and self.compiler.is_ready:
            self.compiler.send_json(cancel_frame(self.id))

        self._finish(CompileResult.CANCELLED)

    def _on_data(self, frame: Frame):
        message = parse_frame(frame)

        if isinstance(message, CompilerEvent) and message.id == self.id:
            if message.start:
                self.started = True

            elif message.finished:
                self._finish(
                    CompileResult.SUCCESS if message.succeeded else CompileResult.FAILURE
                )

        # Progress frames carry no request id.
        elif isinstance(message, CompileProgress):
            self.on_progress.fire(message)

        elif isinstance(message, LogMessage):
            self.on_message.fire(message)

    def _on_disconnect(self, _error: Exception | None):
        self._finish(CompileResult.DISCONNECTED)

    def _finish(self, result: CompileResult):
        self.in_progress = False
        self.compiler.on_receive_data.remove(self._on_data)
        self.compiler.on_disconnect.remove(self._on_disconnect)

        if self._result.resolve(result):
            self._schedule_log(f"Compilation {self.id} ended with {result.value}")

    def _schedule_log(self, message: str):
        if self._logger is None:
            return

        asyncio.ensure_future(
            self._logger.log(
                CompileJobInfo(message=message, job_id=self.id),
                name=self.logger_name,
            )
        )
