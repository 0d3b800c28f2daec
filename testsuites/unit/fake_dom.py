"""
In-memory stand-ins for the parts of Playwright's async Page/Locator API the
probes touch. Selectors are plain dictionary keys; nothing is parsed.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeElement:
    """
    A single form element.

    Args:
        value: Current input value
        checked: Selected-state before any click
        relations: selector -> elements, for locators chained off this one
        checked_after_click: Successive is_checked() answers after a click;
            the last answer repeats. Defaults to [True].
        typed_transform: Applied to typed text (e.g. a maxlength cut-off)
        clear_residue: Value left behind by clear()
        click_error: Message of a PlaywrightError raised on click()
        type_error: Message of a PlaywrightError raised halfway through typing
    """

    def __init__(
        self,
        value: str = "",
        checked: bool = False,
        relations: Optional[Dict[str, List["FakeElement"]]] = None,
        checked_after_click: Optional[Sequence[bool]] = None,
        typed_transform=None,
        clear_residue: str = "",
        click_error: Optional[str] = None,
        type_error: Optional[str] = None,
    ):
        self.value = value
        self.checked = checked
        self.relations = relations or {}
        self.checked_after_click = list(checked_after_click or [True])
        self.typed_transform = typed_transform
        self.clear_residue = clear_residue
        self.click_error = click_error
        self.type_error = type_error
        self.clicks = 0
        self.typed: List[str] = []

    def read_checked(self) -> bool:
        if not self.clicks:
            return self.checked
        if len(self.checked_after_click) > 1:
            return self.checked_after_click.pop(0)
        return self.checked_after_click[0]


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, elements: List[FakeElement]):
        self._page = page
        self.selector = selector
        self.elements = elements

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self._page, self.selector, self.elements[:1])

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        self._page.wait_log.append((self.selector, timeout))
        if not self.elements:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def count(self) -> int:
        return len(self.elements)

    def locator(self, selector: str) -> "FakeLocator":
        related = [rel for el in self.elements for rel in el.relations.get(selector, [])]
        return FakeLocator(self._page, selector, related)

    def _one(self) -> FakeElement:
        if len(self.elements) != 1:
            raise PlaywrightError(
                f"strict mode violation: {self.selector} resolved to {len(self.elements)} elements"
            )
        return self.elements[0]

    async def press_sequentially(self, text: str) -> None:
        element = self._one()
        element.typed.append(text)
        if element.type_error:
            element.value += text[: len(text) // 2]
            raise PlaywrightError(element.type_error)
        if element.typed_transform:
            text = element.typed_transform(text)
        element.value += text

    async def input_value(self) -> str:
        return self._one().value

    async def clear(self) -> None:
        element = self._one()
        element.value = element.clear_residue

    async def click(self) -> None:
        element = self._one()
        if element.click_error:
            raise PlaywrightError(element.click_error)
        element.clicks += 1

    async def is_checked(self) -> bool:
        return self._one().read_checked()


class FakePage:
    """A page whose DOM is a mapping of selector -> matching elements."""

    def __init__(self, dom: Optional[Dict[str, List[FakeElement]]] = None, url: str = "about:blank"):
        self.dom = dom or {}
        self.url = url
        self.wait_log: List[Tuple[str, Optional[float]]] = []

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector, self.dom.get(selector, []))
