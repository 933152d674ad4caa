import os

import pytest

from stingray_link.toolchain import CONFIG_FILENAME


TOOLCHAIN_CONFIG = """
// Written by the toolchain editor.
Build = "dev"
ProjectIndex = 0
Projects = [
    {
        Id = "project-1"
        Name = "Game"
        SourceDirectory = "C:/Projects/Game"
        DataDirectoryBase = "C:/Projects/Game_data"
        MappedFolders = ["C:/Shared/core"]
    }
]
Targets = [
    {
        Id = "00000000-1111-2222-3333-444444444444"
        Name = "Local"
        Platform = "win32"
        Ip = "127.0.0.1"
    }
    {
        Id = "console-target"
        Name = "Devkit"
        Platform = "ps4"
        Ip = "10.0.0.12"
        Port = 14100
    }
]
"""


def write_toolchain(root: str, config: str = TOOLCHAIN_CONFIG) -> str:
    settings = os.path.join(root, "settings")
    os.makedirs(settings, exist_ok=True)

    with open(os.path.join(settings, CONFIG_FILENAME), "w", encoding="utf-8") as config_file:
        config_file.write(config)

    return root


@pytest.fixture
def toolchain_path(temp_directory: str) -> str:
    return write_toolchain(temp_directory)
