"""Relationship field: a react-select bound to another list."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser, Keys
from .base import FieldTestObject, Options


class RelationshipFieldTestObject(FieldTestObject):
    field_type = "relationship"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": f'label[for="{self.field_name}"]',
            "placeholder": ".Select-placeholder",
            "value": ".Select-input input",
            "filled_value": ".Select-value-label",
            "arrow": ".Select-arrow-zone",
            "clear": ".Select-clear-zone",
            "option1": ".Select-option:nth-of-type(1)",
            "option2": ".Select-option:nth-of-type(2)",
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["placeholder"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        """Pick values["option"] from the dropdown, or type values["value"]."""
        if values.get("option"):
            browser.click(self.select("arrow"))
            browser.wait_for_visible(self.select("option1"))
            browser.click(self.select(values["option"]))
        elif values.get("value"):
            browser.clear_value(self.select("value"))
            browser.send_keys(values["value"], Keys.ENTER)

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        selector = self.select("filled_value")
        browser.wait_for_visible(selector)
        browser.assert_equal(browser.get_text(selector), values["value"], f"{self.field_name}: selected value")
