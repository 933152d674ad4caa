from __future__ import annotations

import asyncio

import psutil


def kill_process_tree(pid: int, timeout: float = 5) -> bool:
    """
    Kill ``pid`` and every process below it.

    A process that has already exited counts as killed. Only descendants
    are waited on here; the caller owns reaping ``pid`` itself. Returns
    False if some descendant survived the kill.
    """
    try:
        parent = psutil.Process(pid)
        children = parent.children(recursive=True)

    except psutil.NoSuchProcess:
        return True

    for process in [parent, *children]:
        try:
            process.kill()

        except psutil.NoSuchProcess:
            pass

    _, alive = psutil.wait_procs(children, timeout=timeout)

    return all(_is_gone(process) for process in alive)


def _is_gone(process: psutil.Process) -> bool:
    # Orphaned children linger as zombies until their new parent reaps them.
    try:
        return process.status() == psutil.STATUS_ZOMBIE

    except psutil.NoSuchProcess:
        return True


class CompilerProcess:
    """
    Handle for a compiler process spawned by the supervisor.

    ``kill()`` may be awaited from several places; the process tree is
    only torn down once and every caller gets the same result.
    """

    def __init__(
        self,
        command: str,
        process: asyncio.subprocess.Process,
        kill_timeout: float = 5,
    ) -> None:
        self.command = command
        self._process = process
        self._kill_timeout = kill_timeout
        self._teardown: asyncio.Future[bool] | None = None

    def __repr__(self) -> str:
        return f"CompilerProcess(pid={self.pid}, exit_code={self.exit_code})"

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def exit_code(self) -> int | None:
        return self._process.returncode

    @property
    def running(self) -> bool:
        return self.exit_code is None

    @property
    def killed(self) -> bool:
        return self._teardown is not None

    async def wait(self) -> int:
        return await self._process.wait()

    async def kill(self) -> bool:
        if self._teardown is None:
            self._teardown = asyncio.ensure_future(self._kill())

        return await asyncio.shield(self._teardown)

    async def _kill(self) -> bool:
        killed = True

        if self.running:
            loop = asyncio.get_running_loop()
            killed = await loop.run_in_executor(
                None,
                kill_process_tree,
                self.pid,
                self._kill_timeout,
            )

        try:
            await asyncio.wait_for(self._process.wait(), timeout=self._kill_timeout)

        except asyncio.TimeoutError:
            killed = False

        return killed
