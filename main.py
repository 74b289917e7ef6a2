#!/usr/bin/env python3
"""Restock Monitor — main entry point."""
import asyncio
import logging
import signal
import sys
import os
from datetime import datetime

from browser.session import open_session
from config import Config, ConfigError, LOCAL_SETTINGS_FILE, SETTINGS_FILE, load_settings, validate_config
from models import CheckResult
from monitor import run_monitor
from notifications import Notifier
from output.terminal import render_results_table

logger = logging.getLogger(__name__)


def _setup_logging(logs_dir: str, level: int = logging.INFO):
    os.makedirs(logs_dir, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(
                os.path.join(logs_dir, f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"),
            ),
        ],
    )


def _load_env(path: str = ".env"):
    """Load key=value pairs from .env file into os.environ."""
    if not os.path.exists(path):
        return
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                os.environ.setdefault(key.strip(), value.strip())


def _arg_value(argv: list[str], flag: str, default: str) -> str:
    if flag in argv:
        i = argv.index(flag)
        if i + 1 < len(argv):
            return argv[i + 1]
    return default


def build_config(argv: list[str]) -> Config:
    """Load settings files, apply CLI flags and validate."""
    settings_path = _arg_value(argv, "--settings", SETTINGS_FILE)
    local_path = os.path.join(os.path.dirname(settings_path), LOCAL_SETTINGS_FILE)
    config = Config.from_settings(load_settings(settings_path, local_path))
    if "--visible" in argv:
        config.headless = False
    config.open_browser = config.open_browser and "--no-open" not in argv
    validate_config(config)
    return config


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt


def _handle_sigterm(task: asyncio.Task) -> bool:
    """Cancel ``task`` on SIGTERM so ``open_session`` unwinds and closes the browser.

    Returns True when the handler was registered on the running loop.
    """
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
        return True
    except (NotImplementedError, RuntimeError):
        # Windows event loops have no add_signal_handler
        signal.signal(signal.SIGTERM, _raise_interrupt)
        return False


async def monitor(config: Config, once: bool = False):
    notifier = Notifier(
        config.notification_title,
        webhook_url=config.discord_webhook_url,
        open_browser=config.open_browser,
    )

    def report(results: list[CheckResult]):
        print(render_results_table(results, config.currency_symbol))

    logger.info("=" * 60)
    logger.info("Restock Monitor — Starting")
    logger.info(f"Products: {len(config.products)}  Sleep: {config.sleep_time}s")
    if config.autobuy:
        logger.info(f"Autobuy enabled, limit {config.autobuy_limit}")
    logger.info("=" * 60)

    loop_handler = _handle_sigterm(asyncio.current_task())
    try:
        async with open_session(config) as session:
            budget = await run_monitor(
                session, config, notifier, report=report, max_passes=1 if once else None,
            )
    finally:
        if loop_handler:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGTERM)
    logger.info(f"Purchases made this run: {budget.count}")


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    _load_env()
    _setup_logging(Config().logs_dir, logging.DEBUG if "--debug" in argv else logging.INFO)

    try:
        config = build_config(argv)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    try:
        asyncio.run(monitor(config, once="--once" in argv))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Interrupted; browser closed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
