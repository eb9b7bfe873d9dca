"""Unit tests for browser.py against an in-memory driver."""

from __future__ import annotations

from typing import Dict, List
from unittest.mock import MagicMock

import pytest
from selenium.webdriver.common.by import By

from keystone_e2e.browser import Browser, Keys, locator
from keystone_e2e.errors import ExpectationError


class FakeElement:
    def __init__(self, text: str = "", displayed: bool = True, attributes: Dict[str, str] = None,
                 css: Dict[str, str] = None):
        self.text = text
        self.displayed = displayed
        self.attributes = attributes or {}
        self.css = css or {}
        self.clicks = 0
        self.keys: List[tuple] = []
        self.cleared = False

    def is_displayed(self) -> bool:
        return self.displayed

    def get_attribute(self, name: str):
        return self.attributes.get(name)

    def value_of_css_property(self, name: str):
        return self.css.get(name, "")

    def click(self):
        self.clicks += 1

    def clear(self):
        self.cleared = True

    def send_keys(self, *keys):
        self.keys.append(keys)


class FakeDriver:
    """Returns elements registered per selector."""

    def __init__(self):
        self.elements: Dict[str, List[FakeElement]] = {}
        self.lookups: List[tuple] = []
        self.visited: List[str] = []
        self.switch_to = MagicMock()

    def find_elements(self, by, value):
        self.lookups.append((by, value))
        return self.elements.get(value, [])

    def get(self, url):
        self.visited.append(url)

    def execute_script(self, script, *args):
        return (script, args)


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def browser(driver: FakeDriver) -> Browser:
    return Browser(driver, wait_timeout=0, poll_frequency=0.01)


class TestLocator:

    def test_css(self):
        assert locator(".ItemList a") == (By.CSS_SELECTOR, ".ItemList a")

    def test_xpath(self):
        assert locator("//div[@id='x']") == (By.XPATH, "//div[@id='x']")
        assert locator("(//a)[1]") == (By.XPATH, "(//a)[1]")


class TestExpectations:
    """Test polling expectations succeed and fail as expected."""

    def test_visible(self, browser: Browser, driver: FakeDriver):
        driver.elements["#a"] = [FakeElement(displayed=False), FakeElement()]
        browser.expect_visible("#a")

    def test_visible_fails(self, browser: Browser, driver: FakeDriver):
        driver.elements["#a"] = [FakeElement(displayed=False)]
        with pytest.raises(ExpectationError) as exc_info:
            browser.expect_visible("#a")
        assert exc_info.value.selector == "#a"

    def test_expectation_error_is_assertion(self, browser: Browser):
        with pytest.raises(AssertionError):
            browser.expect_present("#missing")

    def test_not_visible(self, browser: Browser, driver: FakeDriver):
        driver.elements["#a"] = [FakeElement(displayed=False)]
        browser.expect_not_visible("#a")
        browser.expect_not_visible("#missing")

    def test_present_and_not_present(self, browser: Browser, driver: FakeDriver):
        driver.elements["#a"] = [FakeElement(displayed=False)]
        browser.expect_present("#a")
        browser.expect_not_present("#b")
        with pytest.raises(ExpectationError):
            browser.expect_not_present("#a")

    def test_text(self, browser: Browser, driver: FakeDriver):
        driver.elements["h1"] = [FakeElement(text="Post Categories")]
        browser.expect_text_equals("h1", "Post Categories")
        browser.expect_text_not_equals("h1", "Posts")
        browser.expect_text_contains("h1", "Categories")
        with pytest.raises(ExpectationError, match="text to equal 'Posts'"):
            browser.expect_text_equals("h1", "Posts")

    def test_value_and_attribute(self, browser: Browser, driver: FakeDriver):
        driver.elements["input"] = [FakeElement(attributes={"value": "abc", "class": "FormInput big"})]
        browser.expect_value_equals("input", "abc")
        browser.expect_attribute_contains("input", "class", "FormInput")
        with pytest.raises(ExpectationError):
            browser.expect_attribute_contains("input", "class", "small")

    def test_css_property(self, browser: Browser, driver: FakeDriver):
        driver.elements["a"] = [FakeElement(css={"color": "rgba(0, 0, 0, 1)"})]
        browser.expect_css_property_equals("a", "color", "rgba(0, 0, 0, 1)")
        browser.expect_css_property_contains("a", "color", "rgba")

    def test_assert_equal(self, browser: Browser):
        browser.assert_equal("a", "a")
        with pytest.raises(ExpectationError, match="Expected 'b', got 'a'"):
            browser.assert_equal("a", "b")


class TestActions:

    def test_navigate(self, browser: Browser, driver: FakeDriver):
        browser.navigate("http://localhost:3000/keystone/")
        assert driver.visited == ["http://localhost:3000/keystone/"]

    def test_click_first_visible(self, browser: Browser, driver: FakeDriver):
        hidden, shown = FakeElement(displayed=False), FakeElement()
        driver.elements["button"] = [hidden, shown]
        browser.click("button")
        assert hidden.clicks == 0
        assert shown.clicks == 1

    def test_click_missing_raises(self, browser: Browser):
        with pytest.raises(ExpectationError):
            browser.click("button")

    def test_set_and_clear_value(self, browser: Browser, driver: FakeDriver):
        element = FakeElement()
        driver.elements["input"] = [element]
        browser.clear_value("input")
        browser.set_value("input", "abc", Keys.ENTER)
        assert element.cleared
        assert element.keys == [("abc", Keys.ENTER)]

    def test_upload_uses_hidden_input(self, browser: Browser, driver: FakeDriver):
        element = FakeElement(displayed=False)
        driver.elements["input[type=file]"] = [element]
        browser.upload("input[type=file]", "/tmp/a.png")
        assert element.keys == [("/tmp/a.png",)]

    def test_getters(self, browser: Browser, driver: FakeDriver):
        driver.elements["input"] = [FakeElement(text="t", attributes={"value": "v", "name": "n"})]
        assert browser.get_value("input") == "v"
        assert browser.get_text("input") == "t"
        assert browser.get_attribute("input", "name") == "n"

    def test_get_value_defaults_to_empty(self, browser: Browser, driver: FakeDriver):
        driver.elements["input"] = [FakeElement()]
        assert browser.get_value("input") == ""

    def test_send_keys_to_active_element(self, browser: Browser, driver: FakeDriver):
        browser.send_keys("One", Keys.ENTER)
        driver.switch_to.active_element.send_keys.assert_called_once_with("One", Keys.ENTER)

    def test_execute_script(self, browser: Browser):
        assert browser.execute_script("return 1;", "x") == ("return 1;", ("x",))
