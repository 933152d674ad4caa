"""
Keeps the compile server reachable.

A supervision run prefers attaching to a compiler that is already
listening (for example one owned by the editor). Only when nothing answers
does it spawn its own compiler process, which it then owns until the run
ends. A run is one-shot: once the compiler connection is lost the run
finishes and the process is torn down; starting again is up to the caller.
"""

from __future__ import annotations

import asyncio
import traceback
from typing import Awaitable, Callable

from stingray_link.connection import StingrayConnection
from stingray_link.env import Env
from stingray_link.errors import CompilerLaunchError, StingrayLinkError
from stingray_link.events import Multicast
from stingray_link.logging import Entry, Logger
from stingray_link.output import OutputRouter, OutputSink
from stingray_link.registry import ConnectionHandler
from stingray_link.toolchain import Toolchain, ToolchainResolver

from .compiler_process import CompilerProcess
from .logging_models import CompilerDebug, CompilerError, CompilerInfo, CompilerWarn
from .secret import provision_secret


Launcher = Callable[
    [Toolchain, str, list[str]],
    Awaitable[tuple[str, asyncio.subprocess.Process]],
]

SecretProvider = Callable[[str | None], Awaitable[str]]

MASK = "********"


async def launch_compiler(
    toolchain: Toolchain,
    target_id: str,
    arguments: list[str],
) -> tuple[str, asyncio.subprocess.Process]:
    return await toolchain.launch(target_id, arguments=arguments)


class CompilerSupervisor:
    EXTENSION_OUTPUT_NAME = "Stingray Link"

    logger_name = "stingray_link.compiler"

    def __init__(
        self,
        handler: ConnectionHandler,
        resolver: ToolchainResolver,
        env: Env | None = None,
        router: OutputRouter | None = None,
        logger: Logger | None = None,
        launcher: Launcher | None = None,
        secret_provider: SecretProvider | None = None,
        shutdown: asyncio.Event | None = None,
    ) -> None:
        if env is None:
            env = handler.env

        if router is None:
            router = handler.router

        self.on_notification = Multicast()

        self._handler = handler
        self._resolver = resolver
        self._env = env
        self._router = router
        self._logger = logger
        self._launcher = launcher or launch_compiler
        self._secret_provider = secret_provider or provision_secret
        self._shutdown = shutdown

        self._process: CompilerProcess | None = None
        self._task: asyncio.Future | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def process(self) -> CompilerProcess | None:
        return self._process

    @property
    def output(self) -> OutputSink:
        return self._router.sink(self.EXTENSION_OUTPUT_NAME)

    def start(self) -> asyncio.Future:
        """Start a supervision run unless one is already in progress."""
        if not self.running:
            self._task = asyncio.ensure_future(self.supervise())

        return self._task

    def reconnect(self) -> asyncio.Future | None:
        if self.running:
            self._notify("Already connected or connecting to compiler.")
            return None

        if self._env.STINGRAY_LINK_SPAWN_OWN_COMPILER:
            return self.start()

        self._task = asyncio.ensure_future(
            self._handler.connect_to_compiler(
                self._env.STINGRAY_LINK_COMPILER_RECONNECT_ATTEMPTS,
                self._env.retry_interval,
            )
        )

        return self._task

    async def stop(self):
        task = self._task
        if task is not None and not task.done():
            task.cancel()

            try:
                await task

            except asyncio.CancelledError:
                pass

        await self._teardown()

    async def supervise(self):
        try:
            await self._supervise()

        except Exception as err:
            await self._report_failure(err)

        finally:
            self._settle_status()
            await self._teardown()

    async def _supervise(self):
        await self._teardown()

        toolchain = self._resolver.get_active()
        if toolchain is None:
            self._report_missing_toolchain()
            return

        existing = await self._handler.connect_to_compiler(
            self._env.STINGRAY_LINK_COMPILER_ATTACH_ATTEMPTS,
            self._env.retry_interval,
            report_failure=False,
        )

        if existing is not None and existing.is_ready:
            self._report_connected()
            await existing.wait_closed()

            await self._log(
                CompilerInfo(message="Attached compiler disconnected")
            )

            return

        if self._is_shutting_down():
            return

        secret = await self._secret_provider(self._env.app_data_directory)

        command, process = await self._launcher(
            toolchain,
            self._env.STINGRAY_LINK_COMPILER_TARGET_ID,
            ["--asset-server", "--secret", secret],
        )

        command = command.replace(secret, MASK)
        compiler_process = CompilerProcess(command, process)
        self._process = compiler_process

        self._write(f"Launching Stingray compiler with command {command}")
        await self._log(
            CompilerInfo(
                message=f"Spawned compiler process {compiler_process.pid}",
            )
        )

        connection = await self._handler.connect_to_compiler(
            self._env.STINGRAY_LINK_COMPILER_SPAWN_ATTEMPTS,
            self._env.retry_interval,
            abort=lambda: not compiler_process.running,
        )

        if connection is None or not connection.is_ready:
            exit_code = compiler_process.exit_code
            if exit_code is not None:
                self._write(
                    f"The Stingray compiler failed to launch with exit code {exit_code}."
                )

            raise CompilerLaunchError(
                "Failed to launch compile server.",
                command=command,
                exit_code=exit_code,
            )

        self._report_connected()
        await self._wait_lost(connection)

    async def _wait_lost(self, connection: StingrayConnection):
        await connection.wait_closed()

        if self._is_shutting_down():
            return

        self._write(
            "Lost connection to Stingray compiler. Retry with the reconnect command."
        )
        self.output.show(False)
        self._notify("Lost connection to Stingray compiler. See extension log.")

    async def _teardown(self):
        process = self._process
        if process is None:
            return

        self._process = None
        killed = await process.kill()

        if killed:
            await self._log(
                CompilerInfo(message=f"Stopped compiler process {process.pid}")
            )

        else:
            await self._log(
                CompilerWarn(
                    message=f"Compiler process {process.pid} survived the kill",
                    pid=process.pid,
                )
            )

    def _settle_status(self):
        self._handler.settle_disconnected()

    def _report_connected(self):
        self._write("Stingray compiler connected!")
        self._notify("Stingray compiler connection established.")

    def _report_missing_toolchain(self):
        path = self._resolver.toolchain_path
        if not path:
            self._write(
                "The toolchain path is not set. Set STINGRAY_LINK_TOOLCHAIN_PATH to the toolchain root."
            )

        else:
            self._write(f'No toolchain found in path "{path}". Set a correct path.')

        self._write("After configuring the toolchain, run the reconnect command.")
        self.output.show(False)
        self._notify("Toolchain not properly configured. See extension log.")

    async def _report_failure(self, err: Exception):
        if isinstance(err, CompilerLaunchError):
            self._write(
                "Failed to launch compile server. Check the launch command earlier "
                "in this log. After fixing settings run the reconnect command."
            )

            notification = "Failed to launch compile server. See extension log."

        elif isinstance(err, StingrayLinkError):
            self._write(f"Compiler supervision failed: {err}")
            self._write("After fixing settings run the reconnect command.")

            notification = "Compiler supervision failed. See extension log."

        else:
            self._write(f"Compiler supervision failed unexpectedly: {err!r}")
            notification = "Compiler supervision failed. See extension log."

        self.output.show(False)
        self._notify(notification)

        await self._log(
            CompilerError(
                message="".join(traceback.format_exception(err)),
                exit_code=getattr(err, "exit_code", None),
            )
        )

    def _write(self, message: str):
        self.output.append_entry("info", message)

    def _notify(self, message: str):
        try:
            self.on_notification.fire(message)

        except Exception as err:
            self._schedule_log(
                CompilerDebug(message=f"Notification listener failed - {err!r}")
            )

    def _is_shutting_down(self) -> bool:
        return self._shutdown is not None and self._shutdown.is_set()

    def _schedule_log(self, entry: Entry):
        if self._logger is None:
            return

        asyncio.ensure_future(self._logger.log(entry, name=self.logger_name))

    async def _log(self, entry: Entry):
        if self._logger is None:
            return

        await self._logger.log(entry, name=self.logger_name)
