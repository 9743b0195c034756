# tests/test_background.py
"""Tests for the periodic background task helper."""

import asyncio

from scrapesafe_core.app.services.background import PeriodicTask


def test_run_once_returns_result():
    task = PeriodicTask("T", 60, lambda: 5)
    assert task.run_once() == 5


def test_run_once_survives_errors():
    def boom():
        raise RuntimeError("boom")

    task = PeriodicTask("T", 60, boom)
    assert task.run_once() is None


def test_loop_runs_until_stopped():
    calls = []
    task = PeriodicTask("T", 0.01, lambda: calls.append(1))

    async def scenario():
        assert task.start() is True
        assert task.start() is False
        await asyncio.sleep(0.2)
        task.stop()
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert calls
    assert task.running is False
