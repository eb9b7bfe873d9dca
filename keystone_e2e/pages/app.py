"""Admin UI chrome: screens, navbars and sign out, shared by every page."""

from __future__ import annotations

from typing import Optional

from ..browser import Browser
from ..config import admin_ui_url
from ..errors import PageObjectError
from ..utils import key_to_label, key_to_path
from .base import PageObject


SIGNOUT_PAUSE = 0.5


class AdminUIApp(PageObject):
    """Global admin UI commands, available from any screen."""

    elements = {
        # Screens
        "signin_screen": "#signin-view",
        "home_screen": 'div[data-screen-id="home"]',
        "list_screen": 'div[data-screen-id="list"]',
        "item_screen": 'div[data-screen-id="item"]',
        "initial_form_screen": ".Modal-dialog",
        "delete_confirmation_screen": ".Modal-dialog",
        "reset_confirmation_screen": ".Modal-dialog",

        # App links
        "home_icon": '.primary-navbar [data-section-label="octicon-home"]',
        "home_icon_link": '.primary-navbar [data-section-label="octicon-home"] a',
        "front_page_icon": '.primary-navbar [data-section-label="octicon-globe"]',
        "front_page_icon_link": '.primary-navbar [data-section-label="octicon-globe"] a',
        "logout_icon": '.primary-navbar [data-section-label="octicon-sign-out"]',
        "logout_icon_link": '.primary-navbar [data-section-label="octicon-sign-out"] a',
        "primary_navbar": ".primary-navbar",
        "secondary_navbar": ".secondary-navbar",
    }

    def __init__(self, browser: Browser, host: str = "localhost", port: int = 3000):
        super().__init__(browser)
        self.url = admin_ui_url(host, port)

    def goto_signin_screen(self, wait: bool = True) -> None:
        self.browser.navigate(self.url)
        if wait:
            self.wait_for_signin_screen()

    def goto_home_screen(self, wait: bool = True) -> None:
        self.browser.navigate(self.url)
        if wait:
            self.wait_for_home_screen()

    def open_list(self, section: Optional[str] = None, list_name: Optional[str] = None, wait: bool = True) -> None:
        """Open a list through the primary then secondary navbar."""
        if not section or not list_name:
            raise PageObjectError("AdminUIApp: must specify a navbar section and a list")
        self.click_primary_navbar(section)
        self.click_secondary_navbar(list_name, wait=wait)

    def click_primary_navbar(self, section: Optional[str] = None, wait: bool = True) -> None:
        if not section:
            raise PageObjectError("AdminUIApp: must specify a navbar section")
        self.browser.click(self.primary_navbar_section(section))
        if wait:
            self.wait_for_secondary_navbar()

    def click_secondary_navbar(self, list_name: Optional[str] = None, wait: bool = True) -> None:
        if not list_name:
            raise PageObjectError("AdminUIApp: must specify a navbar list")
        self.browser.click(self.secondary_navbar_list(list_name))
        if wait:
            self.wait_for_list_screen()

    def signout(self, wait: bool = True) -> None:
        self.browser.pause(SIGNOUT_PAUSE)
        self.browser.wait_for_visible(self.element("@logout_icon"))
        self.browser.click(self.element("@logout_icon_link"))
        if wait:
            self.wait_for_signin_screen()

    def _wait_for(self, element: str, timeout: Optional[float]) -> None:
        self.browser.wait_for_visible(self.element("@" + element), timeout)

    def wait_for_signin_screen(self, timeout: Optional[float] = None) -> None:
        self._wait_for("signin_screen", timeout)

    def wait_for_home_screen(self, timeout: Optional[float] = None) -> None:
        self._wait_for("home_screen", timeout)

    def wait_for_initial_form_screen(self, timeout: Optional[float] = None) -> None:
        self._wait_for("initial_form_screen", timeout)

    def wait_for_delete_confirmation_screen(self, timeout: Optional[float] = None) -> None:
        self._wait_for("delete_confirmation_screen", timeout)

    def wait_for_reset_confirmation_screen(self, timeout: Optional[float] = None) -> None:
        self._wait_for("reset_confirmation_screen", timeout)

    def wait_for_list_screen(self, timeout: Optional[float] = None) -> None:
        self._wait_for("list_screen", timeout)

    def wait_for_item_screen(self, timeout: Optional[float] = None) -> None:
        self._wait_for("item_screen", timeout)

    def wait_for_secondary_navbar(self, timeout: Optional[float] = None) -> None:
        self._wait_for("secondary_navbar", timeout)

    def assert_primary_navbar_section_visible(self, section: str) -> None:
        self.browser.expect_visible(self.primary_navbar_section(section))

    def assert_secondary_navbar_list_visible(self, list_name: str) -> None:
        self.browser.expect_visible(self.secondary_navbar_list(list_name))

    def assert_css_is_visible(self, css: str) -> None:
        self.browser.expect_visible(css)

    def assert_css_text_equals(self, css: str, text: str) -> None:
        self.browser.expect_text_equals(css, text)

    def assert_css_text_contains(self, css: str, text: str) -> None:
        self.browser.expect_text_contains(css, text)

    @staticmethod
    def primary_navbar_section(section: str) -> str:
        return f'.primary-navbar li[data-section-label="{key_to_label(section)}"]'

    @staticmethod
    def secondary_navbar_list(list_name: str) -> str:
        return f'.secondary-navbar li[data-list-path="{key_to_path(list_name, plural=True)}"]'
