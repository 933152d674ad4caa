from __future__ import annotations

from stingray_link.env import Env
from stingray_link.errors import InvalidToolchainError

from .toolchain import Toolchain


class ToolchainResolver:
    """
    Resolves the active toolchain from configuration.

    The toolchain is cached until the configured path changes. An unset or
    invalid path resolves to None.
    """

    def __init__(self, env: Env) -> None:
        self._env = env
        self._active: Toolchain | None = None
        self._path: str | None = None

    @property
    def toolchain_path(self) -> str | None:
        return self._env.STINGRAY_LINK_TOOLCHAIN_PATH

    def update(self, env: Env):
        self._env = env

    def get_active(self) -> Toolchain | None:
        path = self.toolchain_path
        if self._active is not None and self._path == path:
            return self._active

        self._active = None
        self._path = path

        if not path:
            return None

        try:
            self._active = Toolchain(path)

        except InvalidToolchainError:
            return None

        return self._active
