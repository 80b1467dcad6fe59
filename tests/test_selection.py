# tests/test_selection.py

from __future__ import annotations

from dataclasses import replace

import pytest

from omnifocus_bridge.config import Settings
from omnifocus_bridge.core.ports import ScriptResult
from omnifocus_bridge.providers.applescript_provider import AppleScriptProvider
from omnifocus_bridge.providers.direct_provider import DirectAccessProvider
from omnifocus_bridge.providers.selection import create_provider, resolve_provider
from omnifocus_bridge.tasks.task_models import ProviderVersion

from .fakes import FakeScriptRunner, FakeUrlOpener, SlowScriptRunner


def test_create_pro_provider(settings: Settings) -> None:
    provider = create_provider(ProviderVersion.PRO, settings, runner=FakeScriptRunner())
    assert isinstance(provider, AppleScriptProvider)
    assert provider.config.direct_sql_access is False


def test_create_standard_provider_uses_settings(settings: Settings) -> None:
    settings = replace(settings, direct_sql_access=False, task_limit=42)
    provider = create_provider(ProviderVersion.STANDARD, settings, opener=FakeUrlOpener())
    assert isinstance(provider, DirectAccessProvider)
    assert provider.config.direct_sql_access is False
    assert provider.config.task_limit == 42


def test_providers_have_independent_config(settings: Settings) -> None:
    a = create_provider(ProviderVersion.STANDARD, settings, opener=FakeUrlOpener())
    b = create_provider(ProviderVersion.STANDARD, settings, opener=FakeUrlOpener())
    a.set_config(task_limit=7)
    assert b.config.task_limit == 500


@pytest.mark.asyncio
async def test_forced_provider_skips_detection(settings: Settings) -> None:
    runner = FakeScriptRunner()
    provider = await resolve_provider(replace(settings, provider="standard"), runner=runner)
    assert provider.version == ProviderVersion.STANDARD
    assert runner.scripts == []


@pytest.mark.asyncio
async def test_auto_detects_pro(settings: Settings) -> None:
    runner = FakeScriptRunner(ScriptResult(returncode=0, stdout="Task", stderr=""))
    provider = await resolve_provider(settings, runner=runner)
    assert provider.version == ProviderVersion.PRO
    assert len(runner.scripts) == 1


@pytest.mark.asyncio
async def test_auto_times_out_to_standard(settings: Settings) -> None:
    provider = await resolve_provider(settings, runner=SlowScriptRunner(), opener=FakeUrlOpener())
    assert provider.version == ProviderVersion.STANDARD
