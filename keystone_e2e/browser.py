"""Thin adapter over a Selenium WebDriver.

Page objects and field test objects only talk to Browser, never to the
driver directly. Selectors that start with "/" or "(" are XPath, anything
else is CSS. Every expect_* method polls until the condition holds or the
wait timeout elapses, then raises ExpectationError.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional

from selenium.common.exceptions import StaleElementReferenceException, TimeoutException
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait

from .errors import ExpectationError


logger = logging.getLogger(__name__)

__all__ = ["Browser", "Keys", "locator"]


def locator(selector: str) -> tuple:
    """Return a (By, value) pair for a CSS or XPath selector."""
    if selector.startswith(("/", "(")):
        return By.XPATH, selector
    return By.CSS_SELECTOR, selector


class Browser:
    """Selenium WebDriver wrapper with polling expectations."""

    def __init__(self, driver: Any, wait_timeout: float = 10, poll_frequency: float = 0.2):
        self.driver = driver
        self.wait_timeout = wait_timeout
        self.poll_frequency = poll_frequency

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_all(self, selector: str) -> List[WebElement]:
        by, value = locator(selector)
        return self.driver.find_elements(by, value)

    def _visible(self, selector: str) -> List[WebElement]:
        return [e for e in self.find_all(selector) if e.is_displayed()]

    def _wait(self, condition: Callable[[Any], Any], message: str, selector: Optional[str] = None,
              timeout: Optional[float] = None) -> Any:
        wait = WebDriverWait(
            self.driver,
            self.wait_timeout if timeout is None else timeout,
            poll_frequency=self.poll_frequency,
            ignored_exceptions=[StaleElementReferenceException],
        )
        try:
            return wait.until(condition)
        except TimeoutException:
            raise ExpectationError(message, selector=selector) from None

    # ------------------------------------------------------------------
    # Waits
    # ------------------------------------------------------------------

    def wait_for_visible(self, selector: str, timeout: Optional[float] = None) -> WebElement:
        """Wait for the first visible element matching selector."""
        return self._wait(
            lambda _: next(iter(self._visible(selector)), None),
            f"Element <{selector}> was not visible",
            selector,
            timeout,
        )

    def wait_for_present(self, selector: str, timeout: Optional[float] = None) -> WebElement:
        return self._wait(
            lambda _: next(iter(self.find_all(selector)), None),
            f"Element <{selector}> was not present",
            selector,
            timeout,
        )

    # ------------------------------------------------------------------
    # Expectations
    # ------------------------------------------------------------------

    def expect_visible(self, selector: str, timeout: Optional[float] = None) -> None:
        self.wait_for_visible(selector, timeout)

    def expect_not_visible(self, selector: str, timeout: Optional[float] = None) -> None:
        self._wait(
            lambda _: not self._visible(selector),
            f"Element <{selector}> was visible",
            selector,
            timeout,
        )

    def expect_present(self, selector: str, timeout: Optional[float] = None) -> None:
        self.wait_for_present(selector, timeout)

    def expect_not_present(self, selector: str, timeout: Optional[float] = None) -> None:
        self._wait(
            lambda _: not self.find_all(selector),
            f"Element <{selector}> was present",
            selector,
            timeout,
        )

    def _expect_on_element(self, selector: str, check: Callable[[WebElement], bool],
                           message: str) -> None:
        def condition(_):
            elements = self.find_all(selector)
            return bool(elements) and check(elements[0])

        self._wait(condition, message, selector)

    def expect_text_equals(self, selector: str, text: str) -> None:
        self._expect_on_element(
            selector, lambda e: e.text == text,
            f"Expected element <{selector}> text to equal {text!r}",
        )

    def expect_text_not_equals(self, selector: str, text: str) -> None:
        self._expect_on_element(
            selector, lambda e: e.text != text,
            f"Expected element <{selector}> text not to equal {text!r}",
        )

    def expect_text_contains(self, selector: str, text: str) -> None:
        self._expect_on_element(
            selector, lambda e: text in e.text,
            f"Expected element <{selector}> text to contain {text!r}",
        )

    def expect_value_equals(self, selector: str, value: str) -> None:
        self._expect_on_element(
            selector, lambda e: (e.get_attribute("value") or "") == value,
            f"Expected element <{selector}> value to equal {value!r}",
        )

    def expect_attribute_contains(self, selector: str, attribute: str, value: str) -> None:
        self._expect_on_element(
            selector, lambda e: value in (e.get_attribute(attribute) or ""),
            f"Expected element <{selector}> attribute {attribute} to contain {value!r}",
        )

    def expect_css_property_equals(self, selector: str, prop: str, value: str) -> None:
        self._expect_on_element(
            selector, lambda e: e.value_of_css_property(prop) == value,
            f"Expected element <{selector}> css {prop} to equal {value!r}",
        )

    def expect_css_property_contains(self, selector: str, prop: str, value: str) -> None:
        self._expect_on_element(
            selector, lambda e: value in (e.value_of_css_property(prop) or ""),
            f"Expected element <{selector}> css {prop} to contain {value!r}",
        )

    def assert_equal(self, actual: Any, expected: Any, message: Optional[str] = None) -> None:
        if actual != expected:
            raise ExpectationError(message or f"Expected {expected!r}, got {actual!r}")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def navigate(self, url: str) -> None:
        logger.debug("navigate %s", url)
        self.driver.get(url)

    def click(self, selector: str) -> None:
        self.wait_for_visible(selector).click()

    def clear_value(self, selector: str) -> None:
        self.wait_for_visible(selector).clear()

    def set_value(self, selector: str, *values: str) -> None:
        """Type values into the element, after whatever it already holds."""
        self.wait_for_visible(selector).send_keys(*values)

    def upload(self, selector: str, path: str) -> None:
        """Send a local file path to a (possibly hidden) file input."""
        self.wait_for_present(selector).send_keys(path)

    def get_value(self, selector: str) -> str:
        return self.wait_for_present(selector).get_attribute("value") or ""

    def get_text(self, selector: str) -> str:
        return self.wait_for_visible(selector).text

    def get_attribute(self, selector: str, attribute: str) -> Optional[str]:
        return self.wait_for_present(selector).get_attribute(attribute)

    def execute_script(self, script: str, *args: Any) -> Any:
        return self.driver.execute_script(script, *args)

    def send_keys(self, *keys: str) -> None:
        """Send keys to the focused element (e.g. Keys.ENTER after typing)."""
        self.driver.switch_to.active_element.send_keys(*keys)

    def pause(self, seconds: float) -> None:
        time.sleep(seconds)
