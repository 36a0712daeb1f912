from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from core.errors import CloneFailedError, IngestionTimeoutError

logger = logging.getLogger(__name__)


class GitCloneRunner:
    def __init__(self, *, executable: str = "git", timeout: float = 120.0) -> None:
        self._executable = (executable or "git").strip() or "git"
        self._timeout = float(timeout)

    async def clone(self, url: str, target: Path) -> None:
        """Shallow, single-commit clone of `url` into the (empty) `target` directory."""
        cmd = [
            self._executable,
            "clone",
            "--depth", "1",
            "--single-branch",
            "--quiet",
            url,
            str(target),
        ]
        # Never block on a credential prompt for missing/private repositories
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

        logger.info("Cloning %s", url)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise CloneFailedError(f"Failed to clone repository: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            await _terminate(proc)
            raise IngestionTimeoutError(
                f"Cloning {url} timed out after {self._timeout:g}s"
            ) from e
        except asyncio.CancelledError:
            # Stop git before the caller removes its target directory
            await _terminate(proc)
            raise

        if proc.returncode != 0:
            message = (stderr or b"").decode("utf-8", errors="replace").strip()
            raise CloneFailedError(
                f"Failed to clone repository: {message or f'git exited with {proc.returncode}'}"
            )


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()
