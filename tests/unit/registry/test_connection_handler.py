import asyncio

import pytest

from stingray_link.env import Env
from stingray_link.output import OutputRouter
from stingray_link.registry import ConnectionHandler
from stingray_link.status import CompilerConnectionStatus


def compiler_env(port: int) -> Env:
    return Env(
        STINGRAY_LINK_COMPILER_PORT=port,
        STINGRAY_LINK_COMPILER_RETRY_INTERVAL="20ms",
    )


class TestInstanceSlots:
    @pytest.mark.asyncio
    async def test_connect_all_clamps_to_ceiling(self):
        handler = ConnectionHandler()

        connections = handler.connect_all(14000, 100)

        assert len(connections) == 31
        assert [connection.port for connection in connections] == list(range(14000, 14031))

        handler.close_all()
        await asyncio.gather(*(connection.wait_closed() for connection in connections))

    @pytest.mark.asyncio
    async def test_connect_all_respects_configured_maximum(self):
        handler = ConnectionHandler(env=Env(STINGRAY_LINK_MAX_CONNECTIONS=3))

        connections = handler.connect_all(14000, 10)

        assert len(connections) == 3

        handler.close_all()
        await asyncio.gather(*(connection.wait_closed() for connection in connections))

    @pytest.mark.asyncio
    async def test_same_connection_while_connecting(self, unused_port):
        handler = ConnectionHandler()

        first = handler.get_or_create(unused_port)
        second = handler.get_or_create(unused_port)

        assert first is second

        await first.wait_closed()

    @pytest.mark.asyncio
    async def test_closed_connection_is_replaced(self, unused_port):
        handler = ConnectionHandler()

        first = handler.get_game(unused_port)
        await first.wait_closed()

        second = handler.get_game(unused_port)

        assert second is not first
        assert first.is_closed

        await second.wait_closed()

    @pytest.mark.asyncio
    async def test_connect_sends_continue(self, console_server, wait_for):
        handler = ConnectionHandler()
        game = handler.get_or_create(console_server.port)

        await game.wait_for_outcome()
        await wait_for(lambda: len(console_server.received) == 1)

        assert console_server.received[0] == {
            "type": "lua_debugger",
            "command": "continue",
        }

        handler.close_all()
        await game.wait_closed()

    @pytest.mark.asyncio
    async def test_connections_changed_only_for_connected_instances(
        self,
        console_server,
        unused_port,
    ):
        handler = ConnectionHandler()
        changes: list[bool] = []
        handler.on_connections_changed.add(lambda: changes.append(True))

        failed = handler.get_or_create(unused_port)
        await failed.wait_closed()

        assert changes == []

        game = handler.get_or_create(console_server.port)
        await game.wait_for_outcome()

        assert changes == [True]
        assert handler.get_all_games() == [game]

        game.close()
        await game.wait_closed()

        assert changes == [True, True]
        assert handler.get_all_games() == []

    @pytest.mark.asyncio
    async def test_instance_output_attached_on_connect(self, console_server):
        router = OutputRouter()
        handler = ConnectionHandler(router=router)

        game = handler.get_or_create(console_server.port)
        assert handler.get_output_for_connection(game) is None

        await game.wait_for_outcome()

        sink = handler.get_output_for_connection(game)
        assert sink is not None
        assert sink is handler.get_output_for_name(f"Stingray ({console_server.port})")

        handler.close_all()
        await game.wait_closed()


class TestCompilerSlot:
    @pytest.mark.asyncio
    async def test_connect_to_compiler(self, console_server):
        handler = ConnectionHandler(env=compiler_env(console_server.port))

        compiler = await handler.connect_to_compiler()

        assert compiler is handler.get_compiler()
        assert compiler.is_ready
        assert handler.get_compiler_connection_status() == CompilerConnectionStatus.CONNECTED
        assert handler.get_output_for_name(ConnectionHandler.COMPILER_OUTPUT_NAME) is not None

        handler.close_all()
        await compiler.wait_closed()

    @pytest.mark.asyncio
    async def test_retries_until_attempts_run_out(self, unused_port):
        handler = ConnectionHandler(env=compiler_env(unused_port))
        created: list[object] = []

        original = handler._create_compiler

        def counting_create():
            compiler = original()
            created.append(compiler)
            return compiler

        handler._create_compiler = counting_create

        compiler = await handler.connect_to_compiler(attempts=3, delay=0.01)

        assert compiler.is_closed
        assert len(created) == 3
        assert handler.get_compiler_connection_status() == CompilerConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_retry_absorbs_late_listener(self, server_factory, unused_port):
        handler = ConnectionHandler(env=compiler_env(unused_port))

        async def start_late():
            await asyncio.sleep(0.05)
            return await server_factory(port=unused_port)

        starting = asyncio.ensure_future(start_late())
        compiler = await handler.connect_to_compiler(attempts=50, delay=0.02)
        await starting

        assert compiler.is_ready

        handler.close_all()
        await compiler.wait_closed()

    @pytest.mark.asyncio
    async def test_abort_stops_the_loop(self, unused_port):
        handler = ConnectionHandler(env=compiler_env(unused_port))

        compiler = await handler.connect_to_compiler(attempts=20, abort=lambda: True)

        assert compiler is None
        assert handler.get_compiler_connection_status() == CompilerConnectionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_shutdown_stops_the_loop(self, unused_port):
        shutdown = asyncio.Event()
        shutdown.set()

        handler = ConnectionHandler(env=compiler_env(unused_port), shutdown=shutdown)

        assert await handler.connect_to_compiler(attempts=20) is None


class TestIdentify:
    @pytest.mark.asyncio
    async def test_identify_response_is_cached(self, server_factory):
        def responder(frame: dict):
            if frame.get("type") == "script":
                return [
                    {
                        "type": "stingray_identify",
                        "info": {"platform": "win32", "process_id": 77},
                    }
                ]

        server = await server_factory(responder)
        handler = ConnectionHandler()
        game = handler.get_or_create(server.port)
        await game.wait_for_outcome()

        info = await handler.identify(game)

        assert info.platform == "win32"
        assert info.process_id == 77
        assert await handler.identify(game) is info

        scripts = [frame for frame in server.received if frame["type"] == "script"]
        assert len(scripts) == 1

        handler.close_all()
        await game.wait_closed()

    @pytest.mark.asyncio
    async def test_identify_times_out(self, console_server, fast_env, wait_for):
        handler = ConnectionHandler(env=fast_env)
        game = handler.get_or_create(console_server.port)
        await game.wait_for_outcome()

        data_listeners = len(game.on_receive_data)
        disconnect_listeners = len(game.on_disconnect)

        assert await handler.identify(game) is None
        assert len(game.on_receive_data) == data_listeners
        assert len(game.on_disconnect) == disconnect_listeners

        retry = asyncio.ensure_future(handler.identify(game))
        await wait_for(lambda: len(game.on_receive_data) == data_listeners + 1)

        assert len(game.on_disconnect) == disconnect_listeners + 1

        assert await retry is None
        assert len(game.on_receive_data) == data_listeners
        assert len(game.on_disconnect) == disconnect_listeners

        scripts = [frame for frame in console_server.received if frame["type"] == "script"]
        assert len(scripts) == 2

        handler.close_all()
        await game.wait_closed()

    @pytest.mark.asyncio
    async def test_identify_on_closed_connection(self, unused_port):
        handler = ConnectionHandler()
        game = handler.get_or_create(unused_port)
        await game.wait_closed()

        assert await handler.identify(game) is None
