from __future__ import annotations

import asyncio
from enum import Enum

from stingray_link.connection import StingrayConnection
from stingray_link.events import Multicast
from stingray_link.logging import Logger

from .logging_models import CompilerStatusInfo


class CompilerConnectionStatus(Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"


class CompilerStatusTracker:
    """
    Tri-state compiler connectivity derived from the compiler connection.

    ``status`` is safe to poll; ``on_status_changed`` fires only when the
    value actually changes. The value is never set directly: it follows
    connect attempts, the watched compiler connection and ``settle()``.
    """

    logger_name = "stingray_link.status"

    def __init__(self, logger: Logger | None = None) -> None:
        self.on_status_changed = Multicast()

        self._status = CompilerConnectionStatus.DISCONNECTED
        self._watched: StingrayConnection | None = None
        self._logger = logger
        self._pending_logs: set[asyncio.Task] = set()

    @property
    def status(self) -> CompilerConnectionStatus:
        return self._status

    def connecting(self) -> bool:
        return self._publish(CompilerConnectionStatus.CONNECTING)

    def settle(self, compiler: StingrayConnection | None) -> bool:
        """
        End a connect cycle: DISCONNECTED unless ``compiler`` is ready.
        """
        if compiler is not None and compiler.is_ready:
            return False

        return self._publish(CompilerConnectionStatus.DISCONNECTED)

    def _publish(self, status: CompilerConnectionStatus) -> bool:
        if status == self._status:
            return False

        self._status = status
        self._log_transition(status)
        self.on_status_changed.fire(status)

        return True

    def watch(self, connection: StingrayConnection):
        """
        Publish CONNECTED for a ready compiler connection and DISCONNECTED
        as soon as it closes.
        """
        if connection is not self._watched:
            self._watched = connection
            connection.on_disconnect.add(
                lambda _error: self._on_watched_disconnect(connection)
            )

        self._publish(CompilerConnectionStatus.CONNECTED)

    def _on_watched_disconnect(self, connection: StingrayConnection):
        if connection is self._watched:
            self._watched = None
            self._publish(CompilerConnectionStatus.DISCONNECTED)

    def _log_transition(self, status: CompilerConnectionStatus):
        if self._logger is None:
            return

        task = asyncio.ensure_future(
            self._logger.log(
                CompilerStatusInfo(
                    message=f"Compiler connection status is now {status.value}",
                    status=status.value,
                ),
                name=self.logger_name,
            )
        )

        self._pending_logs.add(task)
        task.add_done_callback(self._pending_logs.discard)
