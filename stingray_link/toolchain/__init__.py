from .models import (
    LaunchCommand as LaunchCommand,
    Project as Project,
    Target as Target,
    ToolchainConfig as ToolchainConfig,
    quote_argument as quote_argument,
)
from .toolchain import (
    BUILD_EXECUTABLES as BUILD_EXECUTABLES,
    CONFIG_FILENAME as CONFIG_FILENAME,
    Toolchain as Toolchain,
)
from .toolchain_resolver import ToolchainResolver as ToolchainResolver
