"""Delete and reset confirmation dialogs."""

from __future__ import annotations

from .base import PageObject


class AdminUIDeleteConfirmation(PageObject):
    elements = {
        "delete_button": 'button[data-button-type="confirm"]',
        "cancel_button": 'button[data-button-type="cancel"]',
    }

    def delete(self) -> None:
        self.click_element("delete_button")

    def cancel(self) -> None:
        self.click_element("cancel_button")


class AdminUIResetConfirmation(PageObject):
    elements = {
        "reset_button": "button.Button.Button--danger",
        "cancel_button": "button.Button.Button--link-cancel",
    }

    def reset(self) -> None:
        self.click_element("reset_button")

    def cancel(self) -> None:
        self.click_element("cancel_button")
