"""Sign in screen."""

from __future__ import annotations

from .base import PageObject


DEFAULT_USER = "user@test.e2e"
DEFAULT_PASSWORD = "test"


class AdminUISignin(PageObject):
    elements = {
        "email": "input[name=email]",
        "password": "input[name=password]",
        "submit_button": "button[type=submit]",
    }

    def signin(self, user: str = DEFAULT_USER, password: str = DEFAULT_PASSWORD, wait: bool = True) -> None:
        """Sign in, then wait for the home screen unless wait is False."""
        self.browser.set_value(self.element("@email"), user)
        self.browser.set_value(self.element("@password"), password)
        self.browser.click(self.element("@submit_button"))
        if wait:
            self.app.wait_for_home_screen()

    def assert_ui(self) -> None:
        for name in ("email", "password", "submit_button"):
            self.assert_element_is_visible(name)
