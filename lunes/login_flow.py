from pathlib import Path
from typing import Optional

from browser import BrowserController
from classifier import classify_landing, classify_outcome, observe
from config import (
    FIELD_VISIBLE_TIMEOUT_MS,
    INPUT_TIMEOUT_MS,
    NAVIGATION_TIMEOUT_MS,
    NETWORK_IDLE_TIMEOUT_MS,
    PASSWORD_SELECTOR,
    SHOT_AFTER_SUBMIT,
    SHOT_BEFORE_SUBMIT,
    SHOT_CHALLENGE,
    SHOT_ERROR,
    SUBMIT_SELECTOR,
    SUBMIT_VISIBLE_TIMEOUT_MS,
    USERNAME_SELECTOR,
    ProbeConfig,
)
from metrics import StageTimer
from models import Disposition, DispositionKind, ObservedState
from notifier import TelegramNotifier


class LoginProbe:
    """One linear login attempt: open, check, fill, submit, classify, notify."""

    def __init__(self, config: ProbeConfig, browser: BrowserController, notifier: TelegramNotifier):
        self.config = config
        self.browser = browser
        self.notifier = notifier
        self.metrics = StageTimer()

    def screenshot_path(self, name: str) -> Path:
        return self.config.screenshot_dir / f"{name}.png"

    async def _capture(self, name: str) -> Path:
        path = await self.browser.screenshot(self.screenshot_path(name))
        print(f"  screenshot: {path}", flush=True)
        return path

    async def _capture_after_error(self) -> Optional[Path]:
        try:
            return await self._capture(SHOT_ERROR)
        except Exception as e:
            print(f"  (error screenshot unavailable: {e.__class__.__name__})", flush=True)
            return None

    async def _close_browser(self) -> None:
        # A failed close must not cost the run its report and notification.
        try:
            await self.browser.stop()
        except Exception as e:
            print(f"[WARN] Closing the browser failed: {e.__class__.__name__}: {e}", flush=True)

    async def _observe(self) -> ObservedState:
        url = await self.browser.get_url()
        text = await self.browser.get_text()
        state = observe(url, text)
        print(f"  url={url} matched={sorted(p.value for p in state.matched_patterns)}", flush=True)
        return state

    async def _attempt(self) -> Disposition:
        run = self.config.run

        self.metrics.start_stage("open login page")
        print(f"Opening {run.login_url}", flush=True)
        await self.browser.start(run.login_url, headless=self.config.headless, timeout=NAVIGATION_TIMEOUT_MS)

        challenge = classify_landing(await self._observe())
        if challenge is not None:
            return challenge.with_screenshot(await self._capture(SHOT_CHALLENGE))

        self.metrics.start_stage("fill credentials")
        await self.browser.wait_visible(USERNAME_SELECTOR, FIELD_VISIBLE_TIMEOUT_MS)
        await self.browser.wait_visible(PASSWORD_SELECTOR, FIELD_VISIBLE_TIMEOUT_MS)
        await self.browser.clear_and_fill(USERNAME_SELECTOR, run.username.get_secret_value(), INPUT_TIMEOUT_MS)
        await self.browser.clear_and_fill(PASSWORD_SELECTOR, run.password.get_secret_value(), INPUT_TIMEOUT_MS)

        self.metrics.start_stage("submit")
        await self.browser.wait_visible(SUBMIT_SELECTOR, SUBMIT_VISIBLE_TIMEOUT_MS)
        await self._capture(SHOT_BEFORE_SUBMIT)
        await self.browser.click_and_settle(
            SUBMIT_SELECTOR,
            click_timeout=INPUT_TIMEOUT_MS,
            idle_timeout=NETWORK_IDLE_TIMEOUT_MS,
        )

        self.metrics.start_stage("classify result")
        after = await self._capture(SHOT_AFTER_SUBMIT)
        return classify_outcome(await self._observe()).with_screenshot(after)

    async def run(self) -> Disposition:
        """Run the flow once. Always closes the browser and sends one notification."""
        try:
            disposition = await self._attempt()
            self.metrics.end_current()
        except Exception as e:
            print(f"[ERROR] {e.__class__.__name__}: {e}", flush=True)
            self.metrics.end_current(error=e.__class__.__name__)
            shot = await self._capture_after_error()
            disposition = Disposition.error(str(e) or e.__class__.__name__).with_screenshot(shot)
        finally:
            await self._close_browser()

        _report(disposition)
        self.metrics.print_summary(disposition.kind.value)
        await self.notifier.send(disposition.to_event())
        return disposition


def _report(disposition: Disposition) -> None:
    if disposition.kind == DispositionKind.SUCCESS:
        print(f"[OK] Login succeeded (or likely succeeded): {disposition.url}", flush=True)
    elif disposition.kind == DispositionKind.CHALLENGE:
        print(f"[BLOCKED] {disposition.message}", flush=True)
    elif disposition.kind in (DispositionKind.FAILURE_KNOWN, DispositionKind.FAILURE_UNKNOWN):
        print(f"[FAIL] {disposition.message}; url: {disposition.url}", flush=True)
    else:
        print(f"[ERROR] Run ended with an error: {disposition.message}", flush=True)
