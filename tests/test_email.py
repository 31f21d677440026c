"""SMTP delivery is best effort: skipped when unconfigured, never raises."""

from typing import List

import pytest

import staffpanel.core.email as email_module
from staffpanel.core.config import settings

# Captured at import, before the autouse fixture swaps in the recorder
REAL_SEND_EMAIL = email_module.send_email


@pytest.mark.asyncio
async def test_send_email_skips_when_smtp_unset(monkeypatch) -> None:
    monkeypatch.setattr(settings, "smtp_host", None)
    assert await REAL_SEND_EMAIL("someone@example.com", "Hi", "<p>x</p>") is False


@pytest.mark.asyncio
async def test_send_email_never_raises(monkeypatch) -> None:
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_password", "secret")
    delivered: List[str] = []

    def fake_deliver(to: str, subject: str, body_html: str) -> None:
        delivered.append(to)

    monkeypatch.setattr(email_module, "_deliver", fake_deliver)
    assert await REAL_SEND_EMAIL("someone@example.com", "Hi", "<p>x</p>") is True
    assert delivered == ["someone@example.com"]

    def broken_deliver(to: str, subject: str, body_html: str) -> None:
        raise OSError("connection refused")

    monkeypatch.setattr(email_module, "_deliver", broken_deliver)
    assert await REAL_SEND_EMAIL("someone@example.com", "Hi", "<p>x</p>") is False
