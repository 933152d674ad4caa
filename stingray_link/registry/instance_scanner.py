from __future__ import annotations

import asyncio

from stingray_link.connection import StingrayConnection
from stingray_link.env import Env
from stingray_link.errors import ToolchainError
from stingray_link.logging import Entry, Logger
from stingray_link.toolchain import Target, ToolchainResolver

from .connection_handler import ConnectionHandler
from .logging_models import ScannerDebug, ScannerError


class InstanceScanner:
    """
    Periodically connects to every engine instance a toolchain target
    could be running.

    Windows targets may run several instances on consecutive ports from
    the instance base port; any other target is scanned at its configured
    address only.
    """

    logger_name = "stingray_link.registry"

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

    def scan_target(self, target: Target) -> list[StingrayConnection]:
        if target.Platform == "win32":
            return self._handler.connect_all(
                self._env.STINGRAY_LINK_INSTANCE_BASE_PORT,
                self._handler.max_connections,
                target.Ip,
            )

        if target.Port is None:
            return []

        return self._handler.connect_all(target.Port, 1, target.Ip)

    async def scan(self) -> list[StingrayConnection]:
        toolchain = self._resolver.get_active()
        if toolchain is None:
            return []

        config = await toolchain.config()

        connections: list[StingrayConnection] = []
        for target in config.Targets:
            connections.extend(self.scan_target(target))

        return connections

    async def run(self):
        await self._log(ScannerDebug(message="Instance scanner started"))

        try:
            while not self._shutdown.is_set():
                try:
                    await self.scan()

                except (ToolchainError, OSError) as err:
                    await self._log(
                        ScannerError(message=f"Instance scan failed - {err}")
                    )

                try:
                    await asyncio.wait_for(
                        self._shutdown.wait(),
                        timeout=self._env.scan_interval,
                    )

                except asyncio.TimeoutError:
                    pass

        finally:
            await self._log(ScannerDebug(message="Instance scanner stopped"))

    async def _log(self, entry: Entry):
        if self._logger is None:
            return

        await self._logger.log(entry, name=self.logger_name)
