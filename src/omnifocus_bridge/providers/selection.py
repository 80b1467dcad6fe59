# src/omnifocus_bridge/providers/selection.py

"""
Composition point for providers.

This is the only module that branches on ProviderVersion; everything downstream
talks to the TaskProvider Protocol.
"""

from __future__ import annotations

import logging

from ..config import Settings
from ..core.ports import ScriptRunner, TaskProvider, UrlOpener
from ..tasks.task_models import ProviderConfig, ProviderVersion
from .applescript_provider import AppleScriptProvider
from .direct_provider import DirectAccessProvider
from .osascript import OsascriptRunner, SystemUrlOpener
from .version_detector import detect_version

logger = logging.getLogger(__name__)


def create_provider(
    version: ProviderVersion,
    settings: Settings,
    *,
    runner: ScriptRunner | None = None,
    opener: UrlOpener | None = None,
) -> TaskProvider:
    if version == ProviderVersion.PRO:
        return AppleScriptProvider(
            runner or OsascriptRunner(settings.osascript_bin),
            ProviderConfig(direct_sql_access=False, task_limit=settings.task_limit),
        )

    return DirectAccessProvider(
        settings.database_path,
        opener or SystemUrlOpener(settings.open_bin),
        ProviderConfig(
            direct_sql_access=settings.direct_sql_access,
            task_limit=settings.task_limit,
        ),
    )


async def resolve_provider(
    settings: Settings,
    *,
    runner: ScriptRunner | None = None,
    opener: UrlOpener | None = None,
) -> TaskProvider:
    """Pick the provider once per process: forced by settings.provider, else detected."""
    runner = runner or OsascriptRunner(settings.osascript_bin)

    if settings.provider == "auto":
        version = await detect_version(runner, timeout_seconds=settings.detection_timeout_seconds)
    else:
        version = ProviderVersion(settings.provider)
        logger.info("Provider forced by settings: %s", version.value)

    provider = create_provider(version, settings, runner=runner, opener=opener)
    logger.info("Using %s provider (%s)", version.value, type(provider).__name__)
    return provider
