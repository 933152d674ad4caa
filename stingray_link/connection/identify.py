from __future__ import annotations

import asyncio

from stingray_link.events import OneShot

from .models import IDENTIFY, Frame, IdentifyInfo, parse_identify_info
from .stingray_connection import StingrayConnection


IDENTIFY_TIMEOUT = 5.0

# Every lookup is guarded so that a missing engine API yields nil (or
# the given fallback) instead of aborting the whole response.
IDENTIFY_LUA = """
local function GET(obj, method, default)
	return (function(ok, ...)
		if ok then return ... end
		return default
	end)(pcall(obj and obj[method]))
end
stingray.Application.console_send({
	type = "stingray_identify",
	info = {
		argv = { GET(Application, "argv", "#ERROR!") },
		build = GET(Application, "build", BUILD),
		build_identifier = GET(Application, "build_identifier", BUILD_IDENTIFIER),
		bundled = GET(Application, "bundled"),
		console_port = GET(Application, "console_port"),
		process_id = GET(Application, "process_id"),
		session_id = GET(Application, "session_id"),
		platform = GET(Application, "platform"),
		time_since_launch = GET(Application, "time_since_launch"),
		jit = { GET(jit, "status") },
	},
})
"""


class IdentifyCache:
    """
    Identify responses cached per connection.

    Entries are only ever added for live connections and must be
    invalidated when their connection disconnects.
    """

    def __init__(self, timeout: float = IDENTIFY_TIMEOUT) -> None:
        self.timeout = timeout
        self._info: dict[StingrayConnection, IdentifyInfo] = {}

    def __contains__(self, connection: StingrayConnection) -> bool:
        return connection in self._info

    def get(self, connection: StingrayConnection) -> IdentifyInfo | None:
        return self._info.get(connection)

    def invalidate(self, connection: StingrayConnection):
        self._info.pop(connection, None)

    def clear(self):
        self._info.clear()

    async def identify(self, connection: StingrayConnection) -> IdentifyInfo | None:
        """
        Ask the remote process to describe itself.

        Resolves to None if no response arrives within the timeout or the
        connection drops first. Listeners are always removed on return.
        """
        info = self._info.get(connection)
        if info is not None:
            return info

        if not connection.is_ready:
            return None

        response: OneShot[IdentifyInfo | None] = OneShot()

        def on_data(frame: Frame):
            if frame.get("type") == IDENTIFY:
                response.resolve(parse_identify_info(frame.get("info")))

        def on_disconnect(_error: Exception | None):
            response.resolve(None)

        connection.on_receive_data.add(on_data)
        connection.on_disconnect.add(on_disconnect)

        try:
            connection.send_lua(IDENTIFY_LUA)
            info = await response.wait(timeout=self.timeout)

        except asyncio.TimeoutError:
            info = None

        finally:
            connection.on_receive_data.remove(on_data)
            connection.on_disconnect.remove(on_disconnect)

        if info is not None and connection.is_ready:
            self._info[connection] = info

        return info
