"""Amazon product page checks: stock, price and buy-now purchase."""
import logging
import math

from browser.session import ElementNotFound, PageSession, SessionError
from config import Config
from models import PurchaseBudget, PurchaseResult

logger = logging.getLogger(__name__)

BUY_NOW_BUTTON = "#buy-now-button"
PRICE_BLOCK = "#priceblock_ourprice"
PLACE_ORDER_BUTTON = "#turbo-checkout-pyo-button"

PLACE_ORDER_TIMEOUT = 5000  # ms


def parse_price(text: str | None, currency_symbol: str = "£") -> float | None:
    """Parse a displayed price like '£1,249.99' into a float.

    Returns None when the text is empty or not a finite number.
    """
    if not text:
        return None
    cleaned = text.replace(currency_symbol, "").replace(",", "").strip()
    try:
        price = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(price):
        return None
    return price


async def is_available(session: PageSession) -> bool:
    """True when the loaded page has at least one buy-now button."""
    buttons = await session.find_all(BUY_NOW_BUTTON)
    return len(buttons) > 0


async def extract_price(session: PageSession, currency_symbol: str = "£") -> float | None:
    """Read the displayed price, or None if it is missing, hidden or unparsable.

    In-stock and out-of-stock layouts place the price differently, so a
    missing price block is an ordinary result rather than an error.
    """
    try:
        element = await session.find_one(PRICE_BLOCK)
    except ElementNotFound:
        logger.debug(f"Price block {PRICE_BLOCK} not on page")
        return None
    text = await session.text_of(element)
    if text is None:
        logger.debug("Price block present but not displayed")
        return None
    price = parse_price(text, currency_symbol)
    if price is None:
        logger.debug(f"Could not parse price from {text!r}")
    return price


async def attempt_purchase(
    session: PageSession, budget: PurchaseBudget, config: Config
) -> PurchaseResult:
    """Buy the product on the loaded page if the budget allows.

    Nothing on the page is touched once the budget is exhausted. A missing
    or slow purchase control reports FAILED and leaves the budget unchanged.
    """
    async with budget.lock:
        if budget.exhausted:
            logger.warning(
                f"Autobuy limit of {budget.limit} reached; skipping purchase"
            )
            return PurchaseResult.BUDGET_EXHAUSTED

        try:
            await session.click(BUY_NOW_BUTTON)
            await session.wait_visible(PLACE_ORDER_BUTTON, PLACE_ORDER_TIMEOUT)
            await session.click(PLACE_ORDER_BUTTON)
        except SessionError as e:
            logger.error(f"Purchase failed: {e}")
            return PurchaseResult.FAILED

        budget.record_purchase()
        logger.info(f"Purchase placed ({budget.count}/{budget.limit})")

    await session.sleep(config.purchase_settle_ms)
    return PurchaseResult.PURCHASED
