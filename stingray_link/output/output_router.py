from __future__ import annotations

from stingray_link.connection.models import MESSAGE, Frame, LogMessage, parse_frame
from stingray_link.connection.stingray_connection import StingrayConnection

from .output_sink import OutputSink


class OutputRouter:
    """
    Routes console log frames into one sink per endpoint name.

    A sink outlives the connections attached to it: reattaching a new
    connection under the same name appends a separator to the existing
    sink so its history survives restarts.
    """

    def __init__(self, directory: str | None = None, max_lines: int | None = None) -> None:
        self._directory = directory
        self._max_lines = max_lines

        self._sinks_by_name: dict[str, OutputSink] = {}
        self._connection_sinks: dict[StingrayConnection, OutputSink] = {}
        self._sink_connections: dict[str, StingrayConnection] = {}

    def sink(self, name: str) -> OutputSink:
        sink = self._sinks_by_name.get(name)
        if sink is None:
            sink = OutputSink(
                name,
                directory=self._directory,
                max_lines=self._max_lines,
            )

            self._sinks_by_name[name] = sink

        return sink

    @property
    def sinks(self) -> list[OutputSink]:
        return list(self._sinks_by_name.values())

    def get_output_for_connection(self, connection: StingrayConnection) -> OutputSink | None:
        return self._connection_sinks.get(connection)

    def get_output_for_name(self, name: str) -> OutputSink | None:
        return self._sinks_by_name.get(name)

    def attach(
        self,
        name: str,
        connection: StingrayConnection,
        show: bool = True,
    ) -> OutputSink:
        """
        Attach a connected connection to the sink called ``name``.

        Attaching the connection already bound to that sink is a no-op.
        """
        existing = self._sinks_by_name.get(name)
        if existing is not None and self._sink_connections.get(name) is connection:
            return existing

        if existing is not None:
            existing.append_separator()
            sink = existing

        else:
            sink = self.sink(name)

        if show:
            sink.show()

        self._connection_sinks[connection] = sink
        self._sink_connections[name] = connection

        def on_disconnect(_error: Exception | None):
            self._connection_sinks.pop(connection, None)
            if self._sink_connections.get(name) is connection:
                del self._sink_connections[name]

        def on_data(frame: Frame):
            route_frame(sink, frame)

        connection.on_disconnect.add(on_disconnect)
        connection.on_receive_data.add(on_data)

        return sink

    def close(self):
        for sink in self._sinks_by_name.values():
            sink.close()


def route_frame(sink: OutputSink, frame: Frame):
    if frame.get("type") == MESSAGE:
        message = parse_frame(frame)
        if isinstance(message, LogMessage):
            sink.append_entry(
                message.level,
                message.message,
                system=message.system,
            )

    # Lua errors carry the remote callstack as an extra block.
    if frame.get("message_type") == "lua_error":
        sink.append_entry(
            frame.get("level", "error"),
            str(frame.get("lua_callstack", "")),
        )
