# src/omnifocus_bridge/providers/version_detector.py

"""
One-shot detection of which OmniFocus automation surface is usable.

A read-only AppleScript probe races a timer. Anything ambiguous (unknown error,
spawn failure, timeout) resolves to the restricted STANDARD identity.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.ports import ScriptResult, ScriptRunner
from ..tasks.task_models import ProviderVersion

logger = logging.getLogger(__name__)

DETECTION_TIMEOUT_SECONDS = 5.0

PROBE_SCRIPT = 'tell application "OmniFocus" to get name of first flattened task'

# errAEEventNotPermitted: the app refuses Apple events (Standard edition).
NOT_AUTHORIZED_SIGNATURE = "-1743"
# Lookup failed because there is no task at all; scripting itself works.
NO_MATCH_SIGNATURE = "Can't get"


def classify_probe(result: ScriptResult) -> ProviderVersion:
    if result.ok:
        return ProviderVersion.PRO
    if NOT_AUTHORIZED_SIGNATURE in result.stderr:
        return ProviderVersion.STANDARD
    if NO_MATCH_SIGNATURE in result.stderr:
        return ProviderVersion.PRO
    logger.debug("Unrecognized probe failure rc=%s stderr=%r", result.returncode, result.stderr)
    return ProviderVersion.STANDARD


def _discard_late_probe(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Late version probe failed: %s", exc)
    else:
        logger.debug("Late version probe finished after timeout: %s", task.result())


async def detect_version(
    runner: ScriptRunner,
    *,
    timeout_seconds: float = DETECTION_TIMEOUT_SECONDS,
) -> ProviderVersion:
    """
    Probe OmniFocus and return the provider identity.

    A probe that outlives the timeout is left to finish on its own; its result is ignored.
    """
    probe = asyncio.ensure_future(runner.check(PROBE_SCRIPT))
    done, _ = await asyncio.wait({probe}, timeout=timeout_seconds)

    if not done:
        probe.add_done_callback(_discard_late_probe)
        logger.warning(
            "Version detection timed out after %.1fs, falling back to %s",
            timeout_seconds,
            ProviderVersion.STANDARD.value,
        )
        return ProviderVersion.STANDARD

    try:
        result = probe.result()
    except Exception:
        logger.exception("Version probe crashed, falling back to %s", ProviderVersion.STANDARD.value)
        return ProviderVersion.STANDARD

    version = classify_probe(result)
    logger.info("Detected OmniFocus version: %s", version.value)
    return version
