"""
Toolchain exceptions.

Raised while resolving a toolchain directory, reading its configuration,
or building a launch command from it. The compiler supervisor treats all
of these as fatal for the current attempt.
"""

from .base import StingrayLinkError


class ToolchainError(StingrayLinkError):
    pass


class InvalidToolchainError(ToolchainError):
    """Raised when the toolchain directory has no configuration file."""

    def __init__(self, path: str, config_path: str) -> None:
        self.path = path
        self.config_path = config_path
        super().__init__(
            f"Invalid toolchain at {path} - missing {config_path}"
        )


class ToolchainConfigError(ToolchainError):
    pass


class TargetNotFoundError(ToolchainError):
    def __init__(self, target_id: str) -> None:
        self.target_id = target_id
        super().__init__(f"Target {target_id} not found")


class UnsupportedPlatformError(ToolchainError):
    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(
            f"Platform {platform} currently not supported for launching"
        )
