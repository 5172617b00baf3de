import asyncio
import os
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from config import LAUNCH_ARGS, NAVIGATION_TIMEOUT_MS, PAGE_TEXT_TIMEOUT_MS, VIEWPORT


def _proxy_settings() -> Optional[dict]:
    """Playwright proxy settings from HTTPS_PROXY / HTTP_PROXY, if any."""
    proxy_url = (os.environ.get("HTTPS_PROXY") or os.environ.get("HTTP_PROXY")
                 or os.environ.get("https_proxy") or os.environ.get("http_proxy"))
    if not proxy_url:
        return None

    parsed = urlparse(proxy_url)
    server = f"{parsed.scheme}://{parsed.hostname}"
    if parsed.port:
        server += f":{parsed.port}"
    proxy = {"server": server}
    if parsed.username:
        proxy["username"] = unquote(parsed.username)
        proxy["password"] = unquote(parsed.password or "")
    return proxy


class BrowserController:
    """Single Chromium session driving the login page."""

    def __init__(self):
        self.browser: Browser | None = None
        self.context: BrowserContext | None = None
        self.page: Page | None = None
        self.playwright = None

    async def start(self, url: str, headless: bool = True, timeout: int = NAVIGATION_TIMEOUT_MS) -> None:
        """Launch browser and navigate to URL."""
        self.playwright = await async_playwright().start()

        launch_kwargs = {"headless": headless, "args": LAUNCH_ARGS}
        proxy = _proxy_settings()
        if proxy:
            launch_kwargs["proxy"] = proxy

        self.browser = await self.playwright.chromium.launch(**launch_kwargs)
        self.context = await self.browser.new_context(viewport=VIEWPORT)
        self.page = await self.context.new_page()

        await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout)

    async def stop(self) -> None:
        """Close context, browser and driver. Each step runs even if an earlier one fails."""
        steps = [
            ("context", self.context.close if self.context else None),
            ("browser", self.browser.close if self.browser else None),
            ("playwright", self.playwright.stop if self.playwright else None),
        ]
        self.page = None
        self.context = None
        self.browser = None
        self.playwright = None

        for name, close in steps:
            if close is None:
                continue
            try:
                await close()
            except PlaywrightError as e:
                print(f"  ({name} close failed: {e.__class__.__name__}: {e})", flush=True)

    async def screenshot(self, path: Path) -> Path:
        """Save a full-page PNG to path, replacing any earlier file."""
        if self.page is None:
            raise RuntimeError("browser is not started")
        path.parent.mkdir(parents=True, exist_ok=True)
        await self.page.screenshot(path=str(path), full_page=True)
        return path

    async def get_url(self) -> str:
        """Get current URL."""
        return self.page.url

    async def get_text(self, timeout: int = PAGE_TEXT_TIMEOUT_MS) -> str:
        """Rendered text of the page body."""
        return await self.page.inner_text("body", timeout=timeout)

    async def wait_visible(self, selector: str, timeout: int) -> None:
        await self.page.locator(selector).wait_for(state="visible", timeout=timeout)

    async def clear_and_fill(self, selector: str, value: str, timeout: int) -> None:
        """Select-all and delete before filling, so autocomplete leftovers are gone."""
        field = self.page.locator(selector)
        await field.click(timeout=timeout)
        await self.page.keyboard.press("Control+A")
        await self.page.keyboard.press("Backspace")
        await field.fill(value, timeout=timeout)

    async def _settle(self, timeout: int) -> bool:
        # Some sites refresh part of the page instead of navigating, so
        # networkidle may never arrive.
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout)
            return True
        except PlaywrightError as e:
            print(f"  (network idle not reached: {e.__class__.__name__})", flush=True)
            return False

    async def click_and_settle(self, selector: str, click_timeout: int, idle_timeout: int) -> None:
        """Click selector while waiting for the network to go idle.

        The idle wait never fails the click; a click error propagates.
        Both are awaited, so this returns once the page is idle or the
        idle wait has hit its own timeout.
        """
        await asyncio.gather(
            self._settle(idle_timeout),
            self.page.locator(selector).click(timeout=click_timeout),
        )
