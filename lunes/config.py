import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from models import RunContext

LOGIN_URL = "https://ctrl.lunes.host/auth/login"

# Browser
LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
VIEWPORT = {"width": 1366, "height": 768}

# Selectors on the login form
USERNAME_SELECTOR = 'input[name="username"]'
PASSWORD_SELECTOR = 'input[name="password"]'
SUBMIT_SELECTOR = 'button[type="submit"]'

# Timeouts (ms for Playwright, seconds for HTTP)
NAVIGATION_TIMEOUT_MS = 60_000
FIELD_VISIBLE_TIMEOUT_MS = 30_000
INPUT_TIMEOUT_MS = 10_000
SUBMIT_VISIBLE_TIMEOUT_MS = 15_000
NETWORK_IDLE_TIMEOUT_MS = 30_000
PAGE_TEXT_TIMEOUT_MS = 10_000
HTTP_TIMEOUT_SECONDS = 30

# Screenshot file stems, overwritten every run
SHOT_CHALLENGE = "01-human-check"
SHOT_BEFORE_SUBMIT = "02-before-submit"
SHOT_AFTER_SUBMIT = "03-after-submit"
SHOT_ERROR = "99-error"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigurationError(ValueError):
    """A required setting is missing or invalid."""


class TelegramSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    bot_token: Optional[SecretStr] = None
    chat_id: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.bot_token.get_secret_value() and self.chat_id)


class ProbeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    run: RunContext
    telegram: TelegramSettings
    screenshot_dir: Path = Path(".")
    headless: bool = True


def _get(env: Mapping[str, str], name: str) -> Optional[str]:
    return env.get(name) or None


def _require(env: Mapping[str, str], name: str) -> str:
    value = _get(env, name)
    if value is None:
        raise ConfigurationError(f"environment variable {name} is not set")
    return value


def load_telegram_settings(env: Optional[Mapping[str, str]] = None) -> TelegramSettings:
    """Read notifier settings. Never fails; missing values disable delivery."""
    env = os.environ if env is None else env
    token = _get(env, "TELEGRAM_BOT_TOKEN")
    return TelegramSettings(
        bot_token=SecretStr(token) if token else None,
        chat_id=_get(env, "TELEGRAM_CHAT_ID"),
    )


def load_config(env: Optional[Mapping[str, str]] = None) -> ProbeConfig:
    """Build the run configuration, failing fast on missing credentials."""
    env = os.environ if env is None else env

    username = _require(env, "LUNES_USERNAME")
    password = _require(env, "LUNES_PASSWORD")

    headless_raw = _get(env, "HEADLESS")
    headless = True if headless_raw is None else headless_raw.lower() in _TRUTHY

    return ProbeConfig(
        run=RunContext(
            username=SecretStr(username),
            password=SecretStr(password),
            login_url=_get(env, "LUNES_LOGIN_URL") or LOGIN_URL,
        ),
        telegram=load_telegram_settings(env),
        screenshot_dir=Path(_get(env, "SCREENSHOT_DIR") or "."),
        headless=headless,
    )
