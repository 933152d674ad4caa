from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from stingray_link.events import Multicast, OneShot
from stingray_link.logging import Entry, Logger

from .drop_counter import DropCounter
from .logging_models import ConsoleDebug, ConsoleError, ConsoleTrace
from .models import (
    Frame,
    command_frame,
    debugger_frame,
    decode_frame,
    encode_frame,
    script_frame,
)


class ConnectionState(Enum):
    CONNECTING = "CONNECTING"
    READY = "READY"
    CLOSED = "CLOSED"


class StingrayConnection:
    """
    A connection to the console server of an engine instance or compiler.

    Connecting starts as soon as the connection is constructed, so it must
    be created inside a running event loop. Events fire in a fixed order:
    ``on_connect`` at most once, then ``on_receive_data`` for each decoded
    frame, then ``on_disconnect`` exactly once with ``last_error``. A
    closed connection is never reopened.
    """

    logger_name = "stingray_link.connection"

    def __init__(
        self,
        port: int,
        ip: str = "127.0.0.1",
        logger: Logger | None = None,
        open_timeout: float | None = 10,
    ) -> None:
        self.port = port
        self.ip = ip
        self.is_ready = False
        self.is_closed = False
        self.last_error: Exception | None = None

        self.on_connect = Multicast()
        self.on_disconnect = Multicast()
        self.on_receive_data = Multicast()

        self.drops = DropCounter()

        self._logger = logger
        self._open_timeout = open_timeout
        self._socket: ClientConnection | None = None
        self._connecting: asyncio.Future[ClientConnection] | None = None
        self._outbound: asyncio.Queue[str] = asyncio.Queue()
        self._close_requested = False
        self._close_task: asyncio.Task | None = None
        self._task = asyncio.ensure_future(self._run())

    def __repr__(self) -> str:
        return f"StingrayConnection({self.ip}:{self.port}, {self.state.value})"

    @property
    def uri(self) -> str:
        return f"ws://{self.ip}:{self.port}"

    @property
    def state(self) -> ConnectionState:
        if self.is_closed:
            return ConnectionState.CLOSED

        if self.is_ready:
            return ConnectionState.READY

        return ConnectionState.CONNECTING

    def close(self):
        if self.is_closed or self._close_requested:
            return

        self._close_requested = True

        if self._socket is None:
            if self._connecting is not None:
                self._connecting.cancel()

        else:
            self._close_task = asyncio.ensure_future(self._socket.close())

    async def wait_for_outcome(self) -> bool:
        """
        Wait until this connection either connects or disconnects.

        Returns True if it connected. Exactly one of the two events
        resolves the wait.
        """
        outcome: OneShot[bool] = OneShot()

        if self.is_ready:
            return True

        if self.is_closed:
            return False

        def release():
            self.on_connect.remove(on_connect)
            self.on_disconnect.remove(on_disconnect)

        def on_connect():
            release()
            outcome.resolve(True)

        def on_disconnect(_error: Exception | None):
            release()
            outcome.resolve(False)

        self.on_connect.add(on_connect)
        self.on_disconnect.add(on_disconnect)

        try:
            return await outcome.wait()

        finally:
            release()

    async def wait_closed(self) -> Exception | None:
        if self.is_closed:
            return self.last_error

        disconnected: OneShot[Exception | None] = OneShot()
        self.on_disconnect.add(disconnected.resolve)

        try:
            return await disconnected.wait()

        finally:
            self.on_disconnect.remove(disconnected.resolve)

    def send_command(self, command: str, *args: Any) -> str:
        frame = command_frame(command, *args)
        self.send_json(frame)

        return frame["id"]

    def send_debugger_command(self, command: str, data: dict[str, Any] | None = None):
        self.send_json(debugger_frame(command, data))

    def send_lua(self, script: str):
        self.send_json(script_frame(script))

    def send_json(self, frame: Frame) -> bool:
        """
        Queue a frame for sending.

        Frames sent while the connection is not ready are dropped and
        counted; delivery is never guaranteed.
        """
        if not self.is_ready:
            self.drops.increment_unsent_message()
            return False

        self._outbound.put_nowait(encode_frame(frame))
        return True

    async def _run(self):
        try:
            if not self._close_requested:
                self._connecting = asyncio.ensure_future(
                    connect(
                        self.uri,
                        open_timeout=self._open_timeout,
                        ping_interval=None,
                        compression=None,
                        max_size=None,
                    )
                )

                self._socket = await self._connecting

        except asyncio.CancelledError:
            if not self._close_requested:
                raise

        except Exception as err:
            self.last_error = err

        if self._socket is not None:
            if self._close_requested:
                await self._socket.close()

            else:
                await self._serve()

        self.is_ready = False
        self.is_closed = True

        await self._fire(self.on_disconnect, self.last_error)

        await self._log(
            ConsoleDebug(
                message=f"Disconnected from {self.uri} ({self.last_error or 'closed'})",
                host=self.ip,
                port=self.port,
            )
        )

    async def _serve(self):
        self.is_ready = True

        await self._fire(self.on_connect)

        await self._log(
            ConsoleDebug(
                message=f"Connected to {self.uri}",
                host=self.ip,
                port=self.port,
            )
        )

        writer = asyncio.ensure_future(self._write_outbound())

        try:
            async for message in self._socket:
                await self._receive(message)

        except ConnectionClosedOK:
            pass

        except ConnectionClosed as err:
            self.last_error = err

        except Exception as err:
            self.last_error = err

        finally:
            writer.cancel()

    async def _receive(self, message: str | bytes):
        if isinstance(message, bytes):
            self.drops.increment_binary_frame()
            return

        frame = decode_frame(message)
        if frame is None:
            self.drops.increment_malformed_frame()
            await self._log(
                ConsoleTrace(
                    message=f"Dropped malformed frame ({len(message)} chars)",
                    host=self.ip,
                    port=self.port,
                )
            )

            return

        await self._fire(self.on_receive_data, frame)

    async def _write_outbound(self):
        while True:
            payload = await self._outbound.get()

            try:
                await self._socket.send(payload)

            except ConnectionClosed:
                return

    async def _fire(self, event: Multicast, *args: Any):
        try:
            event.fire(*args)

        except Exception as err:
            await self._log(
                ConsoleError(
                    message=f"Listener failed for {self.uri} - {err!r}",
                    host=self.ip,
                    port=self.port,
                )
            )

    async def _log(self, entry: Entry):
        if self._logger is None:
            return

        await self._logger.log(entry, name=self.logger_name)
