"""Screenshot capture for positive matches."""
import logging
import os
from datetime import datetime

from browser.session import PageSession

logger = logging.getLogger(__name__)

SCREENSHOT_NAME_FORMAT = "%d-%m-%Y_%H-%M-%S.png"


def screenshot_filename(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime(SCREENSHOT_NAME_FORMAT)


async def capture_screenshot(
    session: PageSession, directory: str = "screenshots", enabled: bool = True
) -> str | None:
    """Save the current page as ``directory/DD-MM-YYYY_HH-MM-SS.png``.

    Returns the written path, or None when capture is disabled. Write
    errors are not caught.
    """
    if not enabled:
        return None
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, screenshot_filename())
    data = await session.screenshot()
    with open(path, "wb") as f:
        f.write(data)
    logger.info(f"Screenshot saved to {path}")
    return path
