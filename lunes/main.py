import asyncio
import sys
from dotenv import load_dotenv

from browser import BrowserController
from config import ConfigurationError, load_config, load_telegram_settings
from login_flow import LoginProbe
from models import Disposition
from notifier import TelegramNotifier


async def main(browser_factory=BrowserController, notifier_factory=TelegramNotifier) -> int:
    notifier = notifier_factory(load_telegram_settings())

    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"ERROR: {e}", flush=True)
        print("  Set LUNES_USERNAME and LUNES_PASSWORD in the environment or a .env file", flush=True)
        disposition = Disposition.configuration_error(str(e))
        await notifier.send(disposition.to_event())
        return disposition.exit_code

    print("Starting Lunes login probe", flush=True)
    print(f"Target: {config.run.login_url}", flush=True)
    print(f"Headless: {config.headless}", flush=True)
    print(f"Screenshots: {config.screenshot_dir}", flush=True)
    print(f"Telegram: {'enabled' if config.telegram.enabled else 'disabled'}", flush=True)
    print("-" * 50, flush=True)

    probe = LoginProbe(config, browser_factory(), notifier)
    disposition = await probe.run()
    return disposition.exit_code


if __name__ == "__main__":
    sys.stdout.reconfigure(line_buffering=True)
    sys.stderr.reconfigure(line_buffering=True)

    load_dotenv()
    sys.exit(asyncio.run(main()))
