# src/omnifocus_bridge/core/state.py

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any, TypeVar

from ..config import Settings
from .ports import TaskProvider

T = TypeVar("T")


@dataclass
class AppState:
    """Everything the console front end needs: settings, the provider and an event loop."""

    settings: Settings
    provider: TaskProvider
    runner: asyncio.Runner = field(default_factory=asyncio.Runner)

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Drive a provider coroutine to completion from synchronous code."""
        return self.runner.run(coro)

    def close(self) -> None:
        self.runner.close()
