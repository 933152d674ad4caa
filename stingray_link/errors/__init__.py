from .base import StingrayLinkError as StingrayLinkError
from .compiler import (
    CompilerLaunchError as CompilerLaunchError,
    SecretProvisioningError as SecretProvisioningError,
)
from .toolchain import (
    InvalidToolchainError as InvalidToolchainError,
    TargetNotFoundError as TargetNotFoundError,
    ToolchainConfigError as ToolchainConfigError,
    ToolchainError as ToolchainError,
    UnsupportedPlatformError as UnsupportedPlatformError,
)
