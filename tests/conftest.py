"""Shared fakes: an in-memory page session and a recording notifier."""
import pytest

from browser.auth import ACCOUNT_LINK, CONTINUE_BUTTON, EMAIL_FIELD, PASSWORD_FIELD, SIGN_IN_BUTTON
from browser.session import ElementNotFound, ElementTimeout
from notifications import Notifier
from retailers.amazon import BUY_NOW_BUTTON, PLACE_ORDER_BUTTON, PRICE_BLOCK


class FakeElement:
    def __init__(self, text: str = "", visible: bool = True):
        self.text = text
        self.visible = visible


class FakeSession:
    """Stands in for PageSession. ``pages`` maps url -> {selector: [FakeElement]}."""

    def __init__(self, pages: dict | None = None, default_page: dict | None = None):
        self.pages = pages or {}
        self.default_page = default_page or {}
        self.current = {}
        self.actions = []
        self.close_count = 0

    def _elements(self, selector: str) -> list:
        return self.current.get(selector, [])

    async def navigate(self, url: str):
        self.actions.append(("navigate", url))
        self.current = self.pages.get(url, self.default_page)

    async def find_all(self, selector: str) -> list:
        return list(self._elements(selector))

    async def find_one(self, selector: str):
        elements = self._elements(selector)
        if not elements:
            raise ElementNotFound(selector)
        return elements[0]

    async def wait_visible(self, selector: str, timeout_ms: int):
        visible = [e for e in self._elements(selector) if e.visible]
        if not visible:
            raise ElementTimeout(selector, timeout_ms)
        self.actions.append(("wait_visible", selector))
        return visible[0]

    async def click(self, selector: str):
        await self.find_one(selector)
        self.actions.append(("click", selector))

    async def fill(self, selector: str, text: str):
        await self.find_one(selector)
        self.actions.append(("fill", selector, text))

    async def text_of(self, element):
        return element.text if element.visible else None

    async def screenshot(self) -> bytes:
        self.actions.append(("screenshot",))
        return b"\x89PNG fake"

    async def sleep(self, ms: float):
        self.actions.append(("sleep", ms))

    async def close(self):
        self.close_count += 1

    def clicks(self) -> list[str]:
        return [a[1] for a in self.actions if a[0] == "click"]

    def sleeps(self) -> list[float]:
        return [a[1] for a in self.actions if a[0] == "sleep"]


class RecordingNotifier(Notifier):
    def __init__(self):
        super().__init__("Test Monitor")
        self.sent = []

    def notify(self, message, url=None, warning=False):
        self.sent.append((message, url, warning))
        return True


def build_product_page(
    price_text: str | None = "£499.99",
    in_stock: bool = True,
    price_visible: bool = True,
    checkout: bool = True,
) -> dict:
    page = {}
    if in_stock:
        page[BUY_NOW_BUTTON] = [FakeElement("Buy Now")]
        if checkout:
            page[PLACE_ORDER_BUTTON] = [FakeElement("Place your order")]
    if price_text is not None:
        page[PRICE_BLOCK] = [FakeElement(price_text, visible=price_visible)]
    return page


def build_login_page(password_visible: bool = True) -> dict:
    return {
        ACCOUNT_LINK: [FakeElement("Hello, sign in")],
        EMAIL_FIELD: [FakeElement()],
        CONTINUE_BUTTON: [FakeElement("Continue")],
        PASSWORD_FIELD: [FakeElement(visible=password_visible)],
        SIGN_IN_BUTTON: [FakeElement("Sign in")],
    }


@pytest.fixture
def product_page():
    return build_product_page


@pytest.fixture
def login_page():
    return build_login_page


@pytest.fixture
def make_session():
    def _make(pages=None, default_page=None):
        return FakeSession(pages=pages, default_page=default_page)
    return _make


@pytest.fixture
def notifier():
    return RecordingNotifier()
