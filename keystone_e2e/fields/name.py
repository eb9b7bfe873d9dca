"""Name field: first and last name inputs."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


class NameFieldTestObject(FieldTestObject):
    field_type = "name"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": f'label[for="{self.field_name}"]',
            "first_name": f'input[name="{self.field_name}.first"]',
            "first_name_placeholder": 'input[placeholder="First name"]',
            "last_name": f'input[name="{self.field_name}.last"]',
            "last_name_placeholder": 'input[placeholder="Last name"]',
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["first_name", "first_name_placeholder", "last_name", "last_name_placeholder"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._fill_inputs(browser, {"first_name": values["first_name"], "last_name": values["last_name"]})

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._assert_values(browser, {"first_name": values["first_name"], "last_name": values["last_name"]})
