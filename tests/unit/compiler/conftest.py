import asyncio
import sys

import pytest_asyncio


async def spawn_sleeper(seconds: float = 30) -> asyncio.subprocess.Process:
    return await asyncio.create_subprocess_exec(
        sys.executable,
        "-c",
        f"import time; time.sleep({seconds})",
    )


@pytest_asyncio.fixture
async def sleeper():
    process = await spawn_sleeper()
    yield process

    if process.returncode is None:
        process.kill()
        await process.wait()
