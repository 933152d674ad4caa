import os

import pytest

from stingray_link.env import Env
from stingray_link.errors import (
    InvalidToolchainError,
    TargetNotFoundError,
    ToolchainConfigError,
    UnsupportedPlatformError,
)
from stingray_link.toolchain import Toolchain, ToolchainResolver, quote_argument

from .conftest import TOOLCHAIN_CONFIG, write_toolchain


COMPILER_TARGET = "00000000-1111-2222-3333-444444444444"


class TestToolchainConfig:
    def test_missing_config(self, temp_directory):
        with pytest.raises(InvalidToolchainError):
            Toolchain(temp_directory)

    @pytest.mark.asyncio
    async def test_config_models(self, toolchain_path):
        config = await Toolchain(toolchain_path).config()

        assert config.Build == "dev"
        assert [target.Platform for target in config.Targets] == ["win32", "ps4"]
        assert config.Targets[1].Port == 14100
        assert config.current_project.MappedFolders == ["C:/Shared/core"]

    @pytest.mark.asyncio
    async def test_config_reloads_when_changed(self, toolchain_path):
        toolchain = Toolchain(toolchain_path)
        first = await toolchain.config()

        assert await toolchain.config() is first

        write_toolchain(toolchain_path, TOOLCHAIN_CONFIG.replace('Build = "dev"', 'Build = "release"'))
        stats = os.stat(toolchain.config_path)
        os.utime(toolchain.config_path, (stats.st_atime, stats.st_mtime + 10))

        second = await toolchain.config()

        assert second is not first
        assert second.Build == "release"

    @pytest.mark.asyncio
    async def test_invalid_config(self, temp_directory):
        toolchain = Toolchain(write_toolchain(temp_directory, "Targets = [ { Name = 3 } ]"))

        with pytest.raises(ToolchainConfigError):
            await toolchain.config()

    @pytest.mark.asyncio
    async def test_byte_order_mark(self, temp_directory):
        toolchain = Toolchain(write_toolchain(temp_directory, "\ufeff" + TOOLCHAIN_CONFIG))

        config = await toolchain.config()

        assert config.Build == "dev"
        assert config.Projects[0].SourceDirectory == "C:/Projects/Game"

    @pytest.mark.asyncio
    async def test_unreadable_config(self, temp_directory):
        toolchain = Toolchain(write_toolchain(temp_directory, 'Build = "dev'))

        with pytest.raises(ToolchainConfigError, match="Unreadable toolchain configuration"):
            await toolchain.config()

    @pytest.mark.asyncio
    async def test_is_project(self, toolchain_path):
        toolchain = Toolchain(toolchain_path)

        assert await toolchain.is_project("c:/projects/GAME")
        assert not await toolchain.is_project("C:/Projects/Other")


class TestLaunchCommand:
    @pytest.mark.asyncio
    async def test_launch_command(self, toolchain_path):
        toolchain = Toolchain(toolchain_path)

        command = await toolchain.launch_command(
            COMPILER_TARGET,
            ["--asset-server", "--secret", "abc"],
        )

        assert command.executable == os.path.join(
            toolchain_path,
            "engine",
            "win64",
            "dev",
            "hydra_win64_dev.exe",
        )
        assert command.arguments == [
            "--toolchain",
            toolchain_path,
            "--asset-server",
            "--secret",
            "abc",
        ]

    @pytest.mark.asyncio
    async def test_unknown_target(self, toolchain_path):
        with pytest.raises(TargetNotFoundError):
            await Toolchain(toolchain_path).launch_command("missing")

    @pytest.mark.asyncio
    async def test_unsupported_platform(self, toolchain_path):
        with pytest.raises(UnsupportedPlatformError):
            await Toolchain(toolchain_path).launch_command("console-target")

    @pytest.mark.asyncio
    async def test_override_executable(self, toolchain_path):
        command = await Toolchain(toolchain_path).launch_command(
            COMPILER_TARGET,
            override_exe="C:/Tools/my engine.exe",
        )

        assert command.command.startswith('"C:/Tools/my engine.exe" --toolchain')

    def test_quote_argument(self):
        assert quote_argument("plain") == "plain"
        assert quote_argument("with space") == '"with space"'
        assert quote_argument('"already quoted"') == '"already quoted"'


class TestToolchainResolver:
    def test_unset_path(self):
        assert ToolchainResolver(Env()).get_active() is None

    def test_invalid_path(self, temp_directory):
        resolver = ToolchainResolver(Env(STINGRAY_LINK_TOOLCHAIN_PATH=temp_directory))

        assert resolver.get_active() is None

    def test_active_toolchain_is_cached(self, toolchain_path):
        resolver = ToolchainResolver(Env(STINGRAY_LINK_TOOLCHAIN_PATH=toolchain_path))

        active = resolver.get_active()

        assert active is not None
        assert resolver.get_active() is active

    def test_update_changes_path(self, toolchain_path):
        resolver = ToolchainResolver(Env(STINGRAY_LINK_TOOLCHAIN_PATH=toolchain_path))
        assert resolver.get_active() is not None

        resolver.update(Env())

        assert resolver.get_active() is None
