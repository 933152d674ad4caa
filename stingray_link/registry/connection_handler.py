"""
Connection registry for the compile server and engine instances.

Owns the single compiler slot and the port keyed instance slots. A slot
holds at most one current connection; closed connections are replaced,
never reopened.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from stingray_link.connection import (
    IdentifyCache,
    StingrayConnection,
)
from stingray_link.connection.models import IdentifyInfo
from stingray_link.env import MAX_CONNECTIONS, Env
from stingray_link.events import Multicast
from stingray_link.logging import Entry, Logger
from stingray_link.output import OutputRouter, OutputSink
from stingray_link.status import CompilerConnectionStatus, CompilerStatusTracker

from .logging_models import RegistryDebug, RegistryInfo


class ConnectionHandler:
    COMPILER_OUTPUT_NAME = "Stingray Compiler"

    logger_name = "stingray_link.registry"

    def __init__(
        self,
        env: Env | None = None,
        logger: Logger | None = None,
        router: OutputRouter | None = None,
        shutdown: asyncio.Event | None = None,
    ) -> None:
        if env is None:
            env = Env()

        if router is None:
            router = OutputRouter()

        self.env = env
        self.router = router
        self.on_connections_changed = Multicast()

        self._logger = logger
        self._shutdown = shutdown
        self._status = CompilerStatusTracker(logger=logger)
        self._identify = IdentifyCache(timeout=env.identify_timeout)
        self._compiler: StingrayConnection | None = None
        self._games: dict[int, StingrayConnection] = {}

    @property
    def on_compiler_status_changed(self) -> Multicast:
        return self._status.on_status_changed

    @property
    def max_connections(self) -> int:
        return self.env.max_connections

    def get_compiler(self) -> StingrayConnection | None:
        return self._compiler

    def get_compiler_connection_status(self) -> CompilerConnectionStatus:
        return self._status.status

    def get_or_create(self, port: int, ip: str | None = None) -> StingrayConnection:
        """
        Return the live connection for ``port``, creating one if the slot is
        empty or holds a closed connection.
        """
        game = self._games.get(port)
        if game is None or game.is_closed:
            game = self._create_game(port, ip or self.env.STINGRAY_LINK_HOST)
            self._games[port] = game

        return game

    get_game = get_or_create

    def connect_all(
        self,
        port_start: int,
        count: int,
        ip: str | None = None,
    ) -> list[StingrayConnection]:
        count = max(0, min(count, self.max_connections, MAX_CONNECTIONS))

        return [
            self.get_or_create(port_start + offset, ip)
            for offset in range(count)
        ]

    connect_all_games = connect_all

    def get_all_games(self) -> list[StingrayConnection]:
        return [
            game for game in tuple(self._games.values())
            if game.is_ready
        ]

    def get_output_for_connection(self, connection: StingrayConnection) -> OutputSink | None:
        return self.router.get_output_for_connection(connection)

    def get_output_for_name(self, name: str) -> OutputSink | None:
        return self.router.get_output_for_name(name)

    async def identify(self, connection: StingrayConnection) -> IdentifyInfo | None:
        return await self._identify.identify(connection)

    async def connect_to_compiler(
        self,
        attempts: int = 1,
        delay: float | None = None,
        abort: Callable[[], bool] | None = None,
        report_failure: bool = True,
    ) -> StingrayConnection | None:
        """
        Wait for the compiler connection to connect, retrying up to
        ``attempts`` times with ``delay`` seconds between attempts.

        Each attempt reuses a connection that is still connecting and only
        replaces a closed one. ``abort`` and the shutdown flag are checked
        before every attempt. With ``report_failure`` off a failed cycle
        leaves the status at CONNECTING for the caller to settle.
        """
        if delay is None:
            delay = self.env.retry_interval

        for attempt in range(attempts):
            if self._is_shutting_down() or (abort and abort()):
                break

            self._status.connecting()

            compiler = self._compiler
            if compiler is None or compiler.is_closed:
                compiler = self._create_compiler()

            if await compiler.wait_for_outcome():
                break

            if attempt + 1 < attempts:
                await asyncio.sleep(delay)

        compiler = self._compiler
        if compiler is not None and compiler.is_ready:
            self.router.attach(self.COMPILER_OUTPUT_NAME, compiler, show=True)
            self._status.watch(compiler)

        elif report_failure:
            self._status.settle(compiler)

        return compiler

    def settle_disconnected(self) -> bool:
        """
        Publish DISCONNECTED unless the compiler connection is ready.

        Closes a connect cycle that ran with ``report_failure`` off.
        """
        return self._status.settle(self._compiler)

    def close_all(self):
        if self._compiler is not None:
            self._compiler.close()

        for game in tuple(self._games.values()):
            game.close()

    def _create_compiler(self) -> StingrayConnection:
        compiler = self._create_connection(
            self.env.STINGRAY_LINK_COMPILER_PORT,
            self.env.STINGRAY_LINK_HOST,
        )

        self._compiler = compiler
        self._schedule_log(
            RegistryDebug(
                message=f"Created compiler connection to {compiler.uri}",
                port=compiler.port,
            )
        )

        return compiler

    def _create_game(self, port: int, ip: str) -> StingrayConnection:
        game = self._create_connection(port, ip)
        connected = False

        def on_connect():
            nonlocal connected
            connected = True

            self.router.attach(f"Stingray ({port})", game, show=True)

            # Instances launched for debugging wait on a breakpoint until
            # a debugger attaches.
            game.send_debugger_command("continue")

            self._schedule_log(
                RegistryInfo(
                    message=f"Instance connected at {game.uri}",
                    port=port,
                )
            )

            self.on_connections_changed.fire()

        def on_disconnect(_error: Exception | None):
            if connected:
                self.on_connections_changed.fire()

        game.on_connect.add(on_connect)
        game.on_disconnect.add(on_disconnect)

        return game

    def _create_connection(self, port: int, ip: str) -> StingrayConnection:
        connection = StingrayConnection(port, ip, logger=self._logger)
        connection.on_disconnect.add(
            lambda _error: self._identify.invalidate(connection)
        )

        return connection

    def _is_shutting_down(self) -> bool:
        return self._shutdown is not None and self._shutdown.is_set()

    def _schedule_log(self, entry: Entry):
        if self._logger is None:
            return

        asyncio.ensure_future(
            self._logger.log(entry, name=self.logger_name)
        )
