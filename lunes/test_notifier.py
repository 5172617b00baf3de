import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest
from pydantic import SecretStr

from config import TelegramSettings
from models import NotificationEvent
from notifier import TelegramNotifier, format_message

TOKEN = "123456:SECRET-TOKEN"
SETTINGS = TelegramSettings(bot_token=SecretStr(TOKEN), chat_id="42")


def make_notifier(settings=SETTINGS, status=200, body=None, error=None):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if error is not None:
            raise error
        return httpx.Response(status, json=body if body is not None else {"ok": True})

    return TelegramNotifier(settings, transport=httpx.MockTransport(handler)), requests


def test_format_message_success():
    event = NotificationEvent(ok=True, stage="login result", message="Judged successful.")
    text = format_message(event, now=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    assert text.splitlines() == [
        "🔔 Lunes auto-login: ✅ success",
        "Stage: login result",
        "Info: Judged successful.",
        "Time: 2026-01-02T03:04:05+00:00",
    ]


def test_format_message_omits_empty_info():
    text = format_message(NotificationEvent(ok=False, stage="exception"))
    assert "❌ failure" in text
    assert "Info:" not in text


def test_unconfigured_notifier_makes_no_calls():
    notifier, requests = make_notifier(settings=TelegramSettings())
    sent = asyncio.run(notifier.send(NotificationEvent(ok=True, stage="login result")))
    assert sent is False
    assert requests == []


def test_text_only_when_screenshot_missing(tmp_path):
    notifier, requests = make_notifier()
    event = NotificationEvent(ok=False, stage="login result", message="x", screenshot=tmp_path / "nope.png")
    assert asyncio.run(notifier.send(event)) is True

    assert len(requests) == 1
    assert requests[0].url.path.endswith("/sendMessage")
    payload = json.loads(requests[0].content)
    assert payload["chat_id"] == "42"
    assert payload["disable_web_page_preview"] is True
    assert "Stage: login result" in payload["text"]


def test_photo_sent_when_screenshot_exists(tmp_path):
    shot = tmp_path / "03-after-submit.png"
    shot.write_bytes(b"\x89PNG fake")
    notifier, requests = make_notifier()
    event = NotificationEvent(ok=True, stage="login result", message="ok", screenshot=shot)
    assert asyncio.run(notifier.send(event)) is True

    assert [r.url.path.rsplit("/", 1)[-1] for r in requests] == ["sendMessage", "sendPhoto"]
    photo = requests[1]
    assert photo.headers["content-type"].startswith("multipart/form-data")
    assert b"Lunes auto-login screenshot (login result)" in photo.content
    assert b"\x89PNG fake" in photo.content


def test_http_error_is_swallowed_and_token_redacted(tmp_path, capsys):
    shot = tmp_path / "99-error.png"
    shot.write_bytes(b"png")
    notifier, requests = make_notifier(status=500, body={"ok": False, "description": "boom"})
    sent = asyncio.run(notifier.send(NotificationEvent(ok=False, stage="exception", screenshot=shot)))

    assert sent is False
    # photo is still attempted after a failed text message
    assert len(requests) == 2
    out = capsys.readouterr().out
    assert "[WARN]" in out
    assert TOKEN not in out


def test_api_ok_false_is_a_failure():
    notifier, _ = make_notifier(body={"ok": False, "description": "chat not found"})
    assert asyncio.run(notifier.send(NotificationEvent(ok=True, stage="login result"))) is False


def test_network_error_is_swallowed(capsys):
    notifier, _ = make_notifier(error=httpx.ConnectError("unreachable"))
    assert asyncio.run(notifier.send(NotificationEvent(ok=True, stage="login result"))) is False
    assert "sendMessage failed" in capsys.readouterr().out
