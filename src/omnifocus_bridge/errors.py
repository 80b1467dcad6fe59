# src/omnifocus_bridge/errors.py

from __future__ import annotations


class BridgeError(Exception):
    """Base class for failures raised by the providers."""


class ScriptExecutionError(BridgeError):
    """osascript exited non-zero or could not be spawned."""

    def __init__(self, stderr: str, returncode: int | None = None) -> None:
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"AppleScript failed: {stderr.strip() or 'Unknown error'}")


class UrlOpenError(BridgeError):
    """The OS 'open' facility refused or failed to hand the URL over."""


class TaskNotFoundError(BridgeError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class DatabaseUnavailableError(BridgeError):
    """The OmniFocus database file does not exist at the configured path."""
