"""
Shared secret handed to a spawned asset server.

The compiler reads the secret back from ``<app data>/Toadman/Hydra/.ssk``
and only accepts console connections that know it.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import hmac
import os
import pathlib
import uuid

from stingray_link.errors import SecretProvisioningError


SECRET_DIRECTORY = ("Toadman", "Hydra")
SECRET_FILENAME = ".ssk"


def generate_secret() -> str:
    digest = hmac.new(
        os.urandom(32),
        uuid.uuid4().bytes,
        hashlib.sha256,
    ).digest()

    return base64.b64encode(digest).decode()


def secret_path(app_data_directory: str) -> pathlib.Path:
    return pathlib.Path(app_data_directory, *SECRET_DIRECTORY, SECRET_FILENAME)


def _write_secret(path: pathlib.Path, secret: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(secret, encoding="utf-8")


async def provision_secret(app_data_directory: str | None) -> str:
    if not app_data_directory:
        raise SecretProvisioningError(
            "No application data directory is available to store the compiler secret"
        )

    if not os.path.isdir(app_data_directory):
        raise SecretProvisioningError(
            f"Application data directory {app_data_directory} does not exist"
        )

    secret = generate_secret()
    path = secret_path(app_data_directory)

    loop = asyncio.get_running_loop()

    try:
        await loop.run_in_executor(None, _write_secret, path, secret)

    except OSError as err:
        raise SecretProvisioningError(
            f"Could not write compiler secret to {path} - {err}"
        ) from err

    return secret
