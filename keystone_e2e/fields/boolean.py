"""Boolean (checkbox) field."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


class BooleanFieldTestObject(FieldTestObject):
    field_type = "boolean"
    label_element = "label"

    @property
    def selector(self) -> str:
        return f"[data-field-name={self.field_name}][data-field-type=boolean]"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "button": "button",
            "label": "span",
            "value": f'label input[name="{self.field_name}"]',
        }

    @property
    def list_screen_elements(self) -> Dict[str, str]:
        return {
            "ui": "span.octicon",
            "checked": "span.octicon-check",
            "not_checked": "span.octicon-x",
            "link": "a",
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["button"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        """Toggle the checkbox when its current value differs from values["value"]."""
        if browser.get_value(self.select("value")) != str(values["value"]):
            browser.click(self.select("button"))

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._assert_values(browser, {"value": values["value"]})

    def _icon_for(self, value: str) -> str:
        if value == "true":
            return self.select_list("checked")
        if value == "false":
            return self.select_list("not_checked")
        raise ValueError(f"boolean list value must be 'true' or 'false', got {value!r}")

    def assert_list_screen_field_value_equals(self, browser: Browser, value: str, options: Options = None) -> None:
        browser.expect_visible(self._icon_for(value))

    def assert_list_screen_field_value_contains(self, browser: Browser, value: str, options: Options = None) -> None:
        browser.expect_visible(self._icon_for(value))
