"""Create item dialog."""

from __future__ import annotations

from .base import FormFieldCommandsMixin, PageObject


class AdminUIInitialForm(FormFieldCommandsMixin, PageObject):
    form_selector = ".Modal-dialog .create-form"
    form_elements = {
        "create_button": 'button[class="Button Button--success"]',
        "cancel_button": 'button[class="Button Button--link-cancel"]',
    }

    elements = {
        "flash_error": ".Alert--danger",
    }

    def save(self) -> None:
        self.browser.click(self.form_element("create_button"))

    def cancel(self) -> None:
        self.browser.click(self.form_element("cancel_button"))
