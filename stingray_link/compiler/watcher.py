from __future__ import annotations

import asyncio

from stingray_link.env import Env
from stingray_link.logging import Entry, Logger
from stingray_link.registry import ConnectionHandler
from stingray_link.toolchain import ToolchainResolver

from .logging_models import CompilerDebug


class CompilerWatcher:
    """
    Background loop that keeps looking for a compiler someone else runs.

    Whenever a toolchain is configured and the compiler slot is empty or
    closed, it runs a long connect cycle; otherwise it idles for one
    interval. The loop ends when the shutdown flag is set.
    """

    logger_name = "stingray_link.compiler"

    def __init__(
        self,
        handler: ConnectionHandler,
        resolver: ToolchainResolver,
        shutdown: asyncio.Event,
        env: Env | None = None,
        logger: Logger | None = None,
    ) -> None:
        if env is None:
            env = handler.env

        self._handler = handler
        self._resolver = resolver
        self._shutdown = shutdown
        self._env = env
        self._logger = logger

    async def run(self):
        await self._log(CompilerDebug(message="Compiler watcher started"))

        try:
            while not self._shutdown.is_set():
                if not await self.poll():
                    await self._idle()

        finally:
            await self._log(CompilerDebug(message="Compiler watcher stopped"))

    async def poll(self) -> bool:
        """Run one connect cycle if one is needed. Returns whether it ran."""
        if self._resolver.get_active() is None:
            return False

        compiler = self._handler.get_compiler()
        if compiler is not None and not compiler.is_closed:
            return False

        await self._handler.connect_to_compiler(
            self._env.STINGRAY_LINK_COMPILER_WATCH_ATTEMPTS,
            self._env.retry_interval,
        )

        return True

    async def _idle(self):
        try:
            await asyncio.wait_for(
                self._shutdown.wait(),
                timeout=self._env.retry_interval,
            )

        except asyncio.TimeoutError:
            pass

    async def _log(self, entry: Entry):
        if self._logger is None:
            return

        await self._logger.log(entry, name=self.logger_name)
