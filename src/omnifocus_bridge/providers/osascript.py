# src/omnifocus_bridge/providers/osascript.py

"""
Process-based access to the automation surfaces.

- OsascriptRunner: pipes an AppleScript program into `osascript -` and waits for exit.
- SystemUrlOpener: hands a URL to the OS `open` command.

Both await full process exit; nothing is retried here.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.ports import ScriptResult
from ..errors import ScriptExecutionError, UrlOpenError

logger = logging.getLogger(__name__)


class OsascriptRunner:
    def __init__(self, binary: str = "osascript") -> None:
        self._binary = binary

    async def check(self, script: str) -> ScriptResult:
        """Run `script` and report the outcome. Never raises for process failures."""
        try:
            process = await asyncio.create_subprocess_exec(
                self._binary,
                "-",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Failed to spawn %s: %s", self._binary, e)
            return ScriptResult(returncode=-1, stdout="", stderr=f"spawn error: {e}")

        stdout, stderr = await process.communicate(script.encode("utf-8"))
        result = ScriptResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace").strip(),
            stderr=stderr.decode("utf-8", errors="replace").strip(),
        )
        logger.debug(
            "osascript rc=%s stdout=%r stderr=%r",
            result.returncode,
            result.stdout[:200],
            result.stderr[:200],
        )
        return result

    async def run(self, script: str) -> str:
        """Run `script` and return trimmed stdout; non-zero exit raises ScriptExecutionError."""
        result = await self.check(script)
        if not result.ok:
            raise ScriptExecutionError(result.stderr, returncode=result.returncode)
        return result.stdout


class SystemUrlOpener:
    def __init__(self, binary: str = "open") -> None:
        self._binary = binary

    async def open_url(self, url: str) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                self._binary,
                url,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise UrlOpenError(f"Failed to run {self._binary}: {e}") from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            msg = stderr.decode("utf-8", errors="replace").strip()
            raise UrlOpenError(msg or f"{self._binary} exited with code {process.returncode}")
