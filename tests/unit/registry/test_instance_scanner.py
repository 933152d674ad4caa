import asyncio

import pytest

from stingray_link.env import Env
from stingray_link.registry import ConnectionHandler, InstanceScanner
from stingray_link.toolchain import Target, ToolchainResolver

from ..toolchain.conftest import write_toolchain


def scanner_config(console_port: int) -> str:
    return f"""
    Build = "dev"
    Projects = []
    Targets = [
        {{ Id = "local" Platform = "win32" Ip = "127.0.0.1" }}
        {{ Id = "devkit" Platform = "ps4" Ip = "127.0.0.1" Port = {console_port} }}
    ]
    """


class TestInstanceScanner:
    @pytest.mark.asyncio
    async def test_scan_target_ports(self, unused_port):
        env = Env(STINGRAY_LINK_INSTANCE_BASE_PORT=unused_port, STINGRAY_LINK_MAX_CONNECTIONS=3)
        handler = ConnectionHandler(env=env)
        scanner = InstanceScanner(handler, ToolchainResolver(env), asyncio.Event())

        windows = scanner.scan_target(Target(Id="local", Platform="win32", Ip="127.0.0.1"))
        console = scanner.scan_target(Target(Id="devkit", Platform="ps4", Ip="127.0.0.1", Port=unused_port + 10))
        unaddressed = scanner.scan_target(Target(Id="other", Platform="ps4"))

        assert [connection.port for connection in windows] == [unused_port, unused_port + 1, unused_port + 2]
        assert [connection.port for connection in console] == [unused_port + 10]
        assert unaddressed == []

        handler.close_all()
        await asyncio.gather(*(connection.wait_closed() for connection in windows + console))

    @pytest.mark.asyncio
    async def test_scan_connects_instances(self, server_factory, temp_directory, wait_for):
        instance = await server_factory()
        devkit = await server_factory()

        env = Env(
            STINGRAY_LINK_TOOLCHAIN_PATH=write_toolchain(temp_directory, scanner_config(devkit.port)),
            STINGRAY_LINK_INSTANCE_BASE_PORT=instance.port,
            STINGRAY_LINK_MAX_CONNECTIONS=1,
            STINGRAY_LINK_SCAN_INTERVAL="20ms",
        )

        shutdown = asyncio.Event()
        handler = ConnectionHandler(env=env, shutdown=shutdown)
        scanner = InstanceScanner(handler, ToolchainResolver(env), shutdown)

        task = asyncio.ensure_future(scanner.run())

        await wait_for(lambda: len(handler.get_all_games()) == 2)
        assert sorted(game.port for game in handler.get_all_games()) == sorted([instance.port, devkit.port])

        shutdown.set()
        await asyncio.wait_for(task, timeout=5)

        games = handler.get_all_games()
        handler.close_all()
        await asyncio.gather(*(game.wait_closed() for game in games))

    @pytest.mark.asyncio
    async def test_scan_without_toolchain(self):
        env = Env()
        handler = ConnectionHandler(env=env)
        scanner = InstanceScanner(handler, ToolchainResolver(env), asyncio.Event())

        assert await scanner.scan() == []
