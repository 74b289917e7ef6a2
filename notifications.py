"""Alert delivery: log line, optional Discord webhook, then open the product page."""
import asyncio
import json
import logging
import urllib.request
import webbrowser
from datetime import datetime

logger = logging.getLogger(__name__)

COLOR_FOUND = 0x57F287  # green
COLOR_WARNING = 0xFEE75C  # yellow

WEBHOOK_TIMEOUT = 10  # seconds


def _format_embed(title: str, message: str, url: str | None, color: int) -> dict:
    embed = {
        "title": title,
        "description": message,
        "color": color,
        "footer": {"text": f"Found {datetime.now().strftime('%Y-%m-%d %H:%M')}"},
    }
    if url:
        embed["url"] = url
    return embed


def _send_webhook(webhook_url: str, payload: dict) -> bool:
    """Send a single webhook payload. Returns True on success."""
    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        webhook_url,
        data=data,
        headers={
            "Content-Type": "application/json",
            "User-Agent": "RestockMonitor/1.0",
        },
    )
    try:
        with urllib.request.urlopen(req, timeout=WEBHOOK_TIMEOUT) as resp:
            if resp.status in (200, 204):
                return True
            logger.warning(f"Discord responded with status {resp.status}")
            return False
    except Exception as e:
        logger.error(f"Failed to send Discord notification: {e}")
        return False


class Notifier:
    """Delivers alerts and then, as a separate best-effort step, opens the page.

    Delivery failures are logged and never raised; the monitor does not
    depend on an alert getting through.
    """

    def __init__(self, title: str, webhook_url: str = "", open_browser: bool = False):
        self.title = title
        self.webhook_url = webhook_url
        self.open_browser = open_browser

    def notify(self, message: str, url: str | None = None, warning: bool = False) -> bool:
        """Send ``message``; returns True unless the webhook delivery failed."""
        level = logging.WARNING if warning else logging.INFO
        logger.log(level, f"{self.title}: {message}")

        delivered = True
        if self.webhook_url:
            color = COLOR_WARNING if warning else COLOR_FOUND
            payload = {"embeds": [_format_embed(self.title, message, url, color)]}
            delivered = _send_webhook(self.webhook_url, payload)

        # Runs after delivery regardless of its result
        if url and self.open_browser:
            self._open(url)
        return delivered

    async def send(self, message: str, url: str | None = None, warning: bool = False) -> bool:
        """Run :meth:`notify` in a worker thread so the event loop keeps going."""
        return await asyncio.to_thread(self.notify, message, url, warning)

    def _open(self, url: str):
        try:
            if not webbrowser.open(url):
                logger.warning(f"No browser available to open {url}")
        except webbrowser.Error as e:
            logger.warning(f"Failed to open {url}: {e}")
