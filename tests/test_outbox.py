"""Post-commit effects run after the response; one failure does not stop the rest."""

import logging
from typing import List

import pytest
from fastapi import BackgroundTasks

from staffpanel.core.outbox import Outbox


@pytest.mark.asyncio
async def test_failing_effect_is_logged_and_others_still_run(caplog) -> None:
    calls: List[str] = []

    async def broken() -> None:
        raise RuntimeError("smtp down")

    def sync_effect(value: str) -> None:
        calls.append(value)

    async def async_effect(value: str) -> None:
        calls.append(value)

    tasks = BackgroundTasks()
    outbox = Outbox(tasks)
    outbox.add(broken)
    outbox.add(sync_effect, "sync")
    outbox.add(async_effect, value="async")

    with caplog.at_level(logging.ERROR, logger="staffpanel.core.outbox"):
        await tasks()

    assert calls == ["sync", "async"]
    assert any("broken" in record.getMessage() for record in caplog.records)
