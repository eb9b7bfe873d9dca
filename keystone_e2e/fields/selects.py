"""Select field."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser, Keys
from .base import FieldTestObject, Options


class SelectFieldTestObject(FieldTestObject):
    field_type = "select"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": f'label[for="{self.field_name}"]',
            "select_field": ".Select",
            "select_value": ".Select-value-label",
            "placeholder": ".Select-placeholder",
            "dropdown_arrow": ".Select-arrow-zone",
            "option_one": '.Select-menu-outer option[value="One"]',
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        # The placeholder is gone once a value is selected
        if options and options.get("placeholder"):
            return ["select_field", "placeholder", "dropdown_arrow"]
        return ["select_field", "dropdown_arrow"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        browser.click(self.select("select_field"))
        browser.send_keys(values["value"], Keys.ENTER)

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        browser.expect_text_equals(self.select("select_value"), values["value"])
