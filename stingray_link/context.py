from __future__ import annotations

import asyncio
import os

from stingray_link.compiler import CompilerSupervisor, CompilerWatcher
from stingray_link.env import Env, load_env
from stingray_link.events import Multicast
from stingray_link.logging import Logger, LoggingConfig
from stingray_link.output import OutputRouter
from stingray_link.registry import ConnectionHandler, InstanceScanner
from stingray_link.toolchain import ToolchainResolver


LOGGER_NAMES = (
    "stingray_link.connection",
    "stingray_link.registry",
    "stingray_link.status",
    "stingray_link.compiler",
)


class LinkContext:
    """
    Owns every long-lived piece of the console link.

    ``start()`` launches the background loops, plus a supervision run when
    configured to spawn a compiler. ``stop()`` undoes all of it, closing
    connections and killing any compiler process this context owns.
    """

    def __init__(self, env: Env | None = None) -> None:
        if env is None:
            env = load_env(Env)

        self.env = env
        self.shutdown = asyncio.Event()
        self.on_notification = Multicast()

        self.logger = Logger()
        self._configure_logging()

        self.router = OutputRouter(directory=env.STINGRAY_LINK_LOGS_DIRECTORY)
        self.resolver = ToolchainResolver(env)
        self.handler = ConnectionHandler(
            env=env,
            logger=self.logger,
            router=self.router,
            shutdown=self.shutdown,
        )

        self.supervisor = CompilerSupervisor(
            self.handler,
            self.resolver,
            env=env,
            router=self.router,
            logger=self.logger,
            shutdown=self.shutdown,
        )
        self.supervisor.on_notification.add(self.on_notification.fire)

        self.scanner = InstanceScanner(
            self.handler,
            self.resolver,
            self.shutdown,
            env=env,
            logger=self.logger,
        )

        self.watcher = CompilerWatcher(
            self.handler,
            self.resolver,
            self.shutdown,
            env=env,
            logger=self.logger,
        )

        self._tasks: list[asyncio.Future] = []

    @property
    def running(self) -> bool:
        return len(self._tasks) > 0

    def start(self):
        if self.running:
            return

        self.shutdown.clear()

        if self.env.STINGRAY_LINK_SPAWN_OWN_COMPILER:
            self.supervisor.start()

        self._tasks.append(asyncio.ensure_future(self.scanner.run()))

        if not self.env.STINGRAY_LINK_SPAWN_OWN_COMPILER:
            self._tasks.append(asyncio.ensure_future(self.watcher.run()))

    def reconnect(self):
        return self.supervisor.reconnect()

    async def stop(self):
        self.shutdown.set()
        self.handler.close_all()

        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
        await self.supervisor.stop()

        self.router.close()
        await self.logger.close()

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    def _configure_logging(self):
        LoggingConfig().update(
            log_directory=self.env.STINGRAY_LINK_LOGS_DIRECTORY,
            log_level=self.env.STINGRAY_LINK_LOG_LEVEL,
            log_output=self.env.STINGRAY_LINK_LOG_OUTPUT,
        )

        logs_directory = self.env.STINGRAY_LINK_LOGS_DIRECTORY
        if logs_directory:
            for name in LOGGER_NAMES:
                self.logger.configure(
                    name=name,
                    path=os.path.join(logs_directory, f"{name}.json"),
                )
