"""Data models for the restock monitor."""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class CheckOutcome(Enum):
    NOT_AVAILABLE = "not available"
    AVAILABLE_UNPARSABLE_PRICE = "price unreadable"
    AVAILABLE_WITHIN_BUDGET = "within budget"
    AVAILABLE_ABOVE_LIMIT = "above limit"


class PurchaseResult(Enum):
    PURCHASED = "purchased"
    BUDGET_EXHAUSTED = "budget exhausted"
    FAILED = "failed"


@dataclass
class PurchaseBudget:
    """Count of automated purchases made this run, capped at ``limit``.

    Hold ``lock`` across the exhausted-check, the purchase clicks and
    ``record_purchase`` so the three act as one step.
    """
    limit: int
    count: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def exhausted(self) -> bool:
        return self.count >= self.limit

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)

    def record_purchase(self):
        if self.exhausted:
            raise RuntimeError(f"Purchase budget of {self.limit} already used")
        self.count += 1


@dataclass
class CheckResult:
    """What one check of one product found. Never persisted."""
    product_name: str
    url: str
    outcome: CheckOutcome
    price: float | None = None
    max_price: float = 0.0
    purchase: PurchaseResult | None = None
    screenshot_path: str | None = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def in_stock(self) -> bool:
        return self.outcome is not CheckOutcome.NOT_AVAILABLE
