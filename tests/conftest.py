"""
Shared fixtures for the console link tests.

Transport, registry and supervisor tests talk to real in-process
websocket servers bound to ephemeral ports.
"""

from __future__ import annotations

import asyncio
import socket
import tempfile
from typing import AsyncGenerator, Awaitable, Callable, Generator

import orjson
import pytest
import pytest_asyncio
from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from stingray_link.env import Env


Responder = Callable[[dict], list[dict] | None]


class ConsoleServer:
    """
    Minimal console server. Records every JSON frame it receives and
    optionally answers through ``responder``.
    """

    def __init__(self, responder: Responder | None = None) -> None:
        self.responder = responder
        self.received: list[dict] = []
        self.connections: list[ServerConnection] = []
        self.port: int | None = None
        self._server: Server | None = None

    async def start(self, port: int = 0) -> ConsoleServer:
        self._server = await serve(self._handle, "127.0.0.1", port)
        self.port = next(iter(self._server.sockets)).getsockname()[1]

        return self

    async def send_all(self, message: str | bytes):
        for connection in list(self.connections):
            try:
                await connection.send(message)

            except ConnectionClosed:
                pass

    async def disconnect_clients(self):
        for connection in list(self.connections):
            await connection.close()

    async def close(self):
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def _handle(self, connection: ServerConnection):
        self.connections.append(connection)

        try:
            async for message in connection:
                frame = orjson.loads(message)
                self.received.append(frame)

                if self.responder is None:
                    continue

                for reply in self.responder(frame) or []:
                    await connection.send(orjson.dumps(reply).decode())

        except ConnectionClosed:
            pass

        finally:
            self.connections.remove(connection)


async def wait_until(
    predicate: Callable[[], bool],
    timeout: float = 2.0,
    interval: float = 0.01,
):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")

        await asyncio.sleep(interval)


@pytest.fixture
def wait_for() -> Callable[..., Awaitable[None]]:
    return wait_until


@pytest_asyncio.fixture
async def console_server() -> AsyncGenerator[ConsoleServer, None]:
    server = await ConsoleServer().start()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def server_factory() -> AsyncGenerator[Callable[..., Awaitable[ConsoleServer]], None]:
    servers: list[ConsoleServer] = []

    async def create(responder: Responder | None = None, port: int = 0):
        server = await ConsoleServer(responder).start(port)
        servers.append(server)
        return server

    yield create

    for server in servers:
        await server.close()


@pytest.fixture
def temp_directory() -> Generator[str, None, None]:
    with tempfile.TemporaryDirectory() as directory:
        yield directory


@pytest.fixture
def fast_env() -> Env:
    """Env with short intervals so retry loops finish quickly."""
    return Env(
        STINGRAY_LINK_COMPILER_RETRY_INTERVAL="20ms",
        STINGRAY_LINK_SCAN_INTERVAL="20ms",
        STINGRAY_LINK_IDENTIFY_TIMEOUT="100ms",
    )


@pytest.fixture
def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
