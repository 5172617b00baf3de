"""Best-effort Telegram delivery of run notifications."""
from datetime import datetime, timezone
from typing import Optional

import httpx

from config import HTTP_TIMEOUT_SECONDS, TelegramSettings
from models import NotificationEvent

TELEGRAM_API = "https://api.telegram.org"


def format_message(event: NotificationEvent, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    lines = [
        f"🔔 Lunes auto-login: {'✅ success' if event.ok else '❌ failure'}",
        f"Stage: {event.stage}",
        f"Info: {event.message}" if event.message else "",
        f"Time: {now.isoformat()}",
    ]
    return "\n".join(line for line in lines if line)


class TelegramNotifier:
    """Sends a text message and, if the screenshot exists, a photo.

    ``send`` never raises. Delivery problems are printed and reported as
    ``False`` so callers can ignore them.
    """

    def __init__(self, settings: TelegramSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _endpoint(self, method: str) -> str:
        return f"{TELEGRAM_API}/bot{self.settings.bot_token.get_secret_value()}/{method}"

    def _redact(self, text: str) -> str:
        token = self.settings.bot_token.get_secret_value() if self.settings.bot_token else ""
        return text.replace(token, "***") if token else text

    async def _post(self, client: httpx.AsyncClient, method: str, **kwargs) -> bool:
        try:
            r = await client.post(self._endpoint(method), **kwargs)
            if r.is_error:
                raise httpx.HTTPStatusError(f"{r.status_code}: {r.text}", request=r.request, response=r)
            body = r.json()
            if isinstance(body, dict) and not body.get("ok", True):
                raise ValueError(f"Telegram API returned ok=false: {body.get('description', '')}")
            return True
        except Exception as e:
            print(f"[WARN] Telegram {method} failed: {self._redact(str(e)) or e.__class__.__name__}", flush=True)
            return False

    async def send(self, event: NotificationEvent) -> bool:
        if not self.settings.enabled:
            print("[WARN] TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID not set, skipping notification", flush=True)
            return False

        try:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS, transport=self._transport) as client:
                delivered = await self._post(client, "sendMessage", json={
                    "chat_id": self.settings.chat_id,
                    "text": format_message(event),
                    "disable_web_page_preview": True,
                })

                screenshot = event.screenshot
                if screenshot and screenshot.is_file():
                    photo_sent = await self._post(
                        client,
                        "sendPhoto",
                        data={
                            "chat_id": self.settings.chat_id,
                            "caption": f"Lunes auto-login screenshot ({event.stage})",
                        },
                        files={"photo": ("screenshot.png", screenshot.read_bytes(), "image/png")},
                    )
                    delivered = delivered and photo_sent
            return delivered
        except Exception as e:
            print(f"[WARN] Telegram notification failed: {self._redact(str(e)) or e.__class__.__name__}", flush=True)
            return False
