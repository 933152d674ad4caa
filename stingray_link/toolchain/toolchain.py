from __future__ import annotations

import asyncio
import os
import pathlib

import pydantic
import sjson

from stingray_link.errors import (
    InvalidToolchainError,
    TargetNotFoundError,
    ToolchainConfigError,
    UnsupportedPlatformError,
)

from .models import LaunchCommand, ToolchainConfig


CONFIG_FILENAME = "ToolChainConfiguration_1_9.config"

BUILD_EXECUTABLES = {
    "debug": "hydra_win64_dev.exe",
    "dev": "hydra_win64_dev.exe",
    "release": "vermintide2",
}

LAUNCHABLE_PLATFORMS = {
    "win32": "win64",
}


class Toolchain:
    """
    An installation of the engine and its tools.

    Raises InvalidToolchainError on construction if the toolchain has no
    configuration file.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.config_path = os.path.join(path, "settings", CONFIG_FILENAME)

        if not os.path.isfile(self.config_path):
            raise InvalidToolchainError(path, self.config_path)

        self._config_mtime: float = 0
        self._config_data: ToolchainConfig | None = None

    async def config(self) -> ToolchainConfig:
        """
        Read the toolchain configuration, re-parsing only when the file
        has changed since the last read.
        """
        loop = asyncio.get_running_loop()
        stats = await loop.run_in_executor(None, os.stat, self.config_path)

        if self._config_data is None or stats.st_mtime > self._config_mtime:
            text = await loop.run_in_executor(
                None,
                pathlib.Path(self.config_path).read_text,
                "utf-8-sig",
            )

            try:
                data = sjson.loads(text)

            except Exception as err:
                raise ToolchainConfigError(
                    f"Unreadable toolchain configuration {self.config_path} - {err}"
                ) from err

            try:
                self._config_data = ToolchainConfig.model_validate(data)

            except pydantic.ValidationError as err:
                raise ToolchainConfigError(
                    f"Invalid toolchain configuration {self.config_path} - {err}"
                ) from err

            self._config_mtime = stats.st_mtime

        return self._config_data

    async def launch_command(
        self,
        target_id: str,
        arguments: list[str] | None = None,
        override_exe: str | None = None,
    ) -> LaunchCommand:
        config = await self.config()

        target = next(
            (target for target in config.Targets if target.Id == target_id),
            None,
        )

        if target is None:
            raise TargetNotFoundError(target_id)

        platform_directory = LAUNCHABLE_PLATFORMS.get(target.Platform)
        if platform_directory is None:
            raise UnsupportedPlatformError(target.Platform)

        executable = override_exe
        if executable is None:
            executable_name = BUILD_EXECUTABLES.get(config.Build)
            if executable_name is None:
                raise ToolchainConfigError(f"Unknown build {config.Build}")

            executable = os.path.join(
                self.path,
                "engine",
                platform_directory,
                config.Build,
                executable_name,
            )

        return LaunchCommand(
            executable=executable,
            arguments=[
                "--toolchain",
                self.path,
                *(arguments or []),
            ],
        )

    async def launch(
        self,
        target_id: str,
        arguments: list[str] | None = None,
        override_exe: str | None = None,
    ) -> tuple[str, asyncio.subprocess.Process]:
        """
        Launch an engine process for ``target_id``.

        Returns the shell command used and the spawned process.
        """
        launch_command = await self.launch_command(
            target_id,
            arguments=arguments,
            override_exe=override_exe,
        )

        command = launch_command.command
        process = await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )

        return command, process

    async def is_project(self, workspace_root: str) -> bool:
        config = await self.config()
        root = workspace_root.upper()

        return any(
            project.SourceDirectory.upper() == root
            for project in config.Projects
        )
