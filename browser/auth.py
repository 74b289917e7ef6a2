"""Amazon sign-in sequence, run once before monitoring starts."""
import logging

from browser.session import PageSession, SessionError
from config import Config

logger = logging.getLogger(__name__)

ACCOUNT_LINK = "#nav-link-accountList-nav-line-1"
EMAIL_FIELD = "#ap_email"
CONTINUE_BUTTON = "#continue"
PASSWORD_FIELD = "#ap_password"
SIGN_IN_BUTTON = "#signInSubmit"


async def _sign_in(session: PageSession, config: Config):
    await session.navigate(config.home_url)
    await session.click(ACCOUNT_LINK)
    await session.wait_visible(EMAIL_FIELD, config.login_timeout)
    await session.fill(EMAIL_FIELD, config.amazon_username)
    await session.click(CONTINUE_BUTTON)
    await session.wait_visible(PASSWORD_FIELD, config.login_timeout)
    await session.fill(PASSWORD_FIELD, config.amazon_password)
    await session.click(SIGN_IN_BUTTON)


async def login(session: PageSession, config: Config):
    """Sign in to the retailer account.

    A missing or slow control fails the attempt. With the default of one
    attempt the error propagates and the monitor never starts; higher
    ``login_attempts`` retry with exponential backoff and re-raise the
    last error once they run out.
    """
    for attempt in range(1, config.login_attempts + 1):
        try:
            logger.info(f"Logging in (attempt {attempt}/{config.login_attempts})")
            await _sign_in(session, config)
            logger.info("Completed login")
            return
        except SessionError as e:
            if attempt >= config.login_attempts:
                logger.error(f"Login failed: {e}")
                raise
            wait = config.retry_backoff ** attempt
            logger.warning(f"Login attempt {attempt} failed: {e}; retrying in {wait:.0f}s")
            await session.sleep(wait * 1000)
