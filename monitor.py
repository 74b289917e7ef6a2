"""Poll-check-react cycle over the tracked products."""
import logging
from typing import Callable

from browser.auth import login
from browser.session import PageSession
from config import Config, TrackedProduct
from evidence import capture_screenshot
from models import CheckOutcome, CheckResult, PurchaseBudget
from notifications import Notifier
from retailers.amazon import attempt_purchase, extract_price, is_available

logger = logging.getLogger(__name__)


def effective_max_price(product: TrackedProduct, config: Config) -> float:
    """Per-product override if set, else the global default. 0 means no limit."""
    if product.max_price is not None:
        return product.max_price
    return config.max_price


def within_limit(price: float, max_price: float) -> bool:
    return max_price == 0 or price <= max_price


async def check_product(
    session: PageSession,
    product: TrackedProduct,
    max_price: float,
    config: Config,
    budget: PurchaseBudget,
    notifier: Notifier,
) -> CheckResult:
    """Check one product page and react to what is found.

    Out of stock, unreadable price and above-limit price all end the check
    quietly (the unreadable case with a notification). A price within the
    limit notifies, buys when autobuy is on and then captures a screenshot.
    """
    logger.info(f"Checking {product.name}")
    await session.navigate(product.url)
    result = CheckResult(
        product_name=product.name,
        url=product.url,
        outcome=CheckOutcome.NOT_AVAILABLE,
        max_price=max_price,
    )

    if not await is_available(session):
        logger.info(f"{product.name} not available")
        return result

    symbol = config.currency_symbol
    price = await extract_price(session, symbol)
    if price is None:
        result.outcome = CheckOutcome.AVAILABLE_UNPARSABLE_PRICE
        await notifier.send(
            f"Found {product.name} but could not read the price",
            url=product.url,
            warning=True,
        )
        return result

    result.price = price
    if not within_limit(price, max_price):
        result.outcome = CheckOutcome.AVAILABLE_ABOVE_LIMIT
        logger.info(
            f"{product.name} available for {symbol}{price:.2f}, "
            f"above limit of {symbol}{max_price:.2f}"
        )
        return result

    result.outcome = CheckOutcome.AVAILABLE_WITHIN_BUDGET
    await notifier.send(f"Found {product.name} for {symbol}{price:.2f}", url=product.url)
    if config.autobuy:
        result.purchase = await attempt_purchase(session, budget, config)
    result.screenshot_path = await capture_screenshot(
        session, config.screenshots_dir, enabled=config.take_screenshots
    )
    logger.info(f"Finished checking {product.name}")
    return result


async def run_monitor(
    session: PageSession,
    config: Config,
    notifier: Notifier,
    budget: PurchaseBudget | None = None,
    report: Callable[[list[CheckResult]], None] | None = None,
    max_passes: int | None = None,
) -> PurchaseBudget:
    """Log in if configured, then check every product, sleep, and repeat.

    Runs forever unless ``max_passes`` is given. Returns the budget so
    callers can see how many purchases were made.
    """
    if budget is None:
        budget = PurchaseBudget(limit=config.autobuy_limit)

    if config.login:
        await login(session, config)

    passes = 0
    while max_passes is None or passes < max_passes:
        results = []
        for product in config.products:
            max_price = effective_max_price(product, config)
            results.append(
                await check_product(session, product, max_price, config, budget, notifier)
            )
        passes += 1

        if report:
            report(results)

        if max_passes is not None and passes >= max_passes:
            break
        logger.info(
            f"Finished checking all products; sleeping for {config.sleep_time} seconds"
        )
        await session.sleep(config.sleep_time * 1000)

    return budget
