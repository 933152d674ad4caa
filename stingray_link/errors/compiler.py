"""
Compiler supervision exceptions.
"""

from .base import StingrayLinkError


class SecretProvisioningError(StingrayLinkError):
    """
    Raised when the asset server secret can not be written.

    Unlike a failed spawn this is a hard error: without a shared secret
    the compiler can not be launched at all.
    """
    pass


class CompilerLaunchError(StingrayLinkError):
    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        super().__init__(message)
