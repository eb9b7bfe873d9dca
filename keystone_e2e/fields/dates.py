"""Datetime field: separate date and time inputs plus a Now button."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


class DatetimeFieldTestObject(FieldTestObject):
    field_type = "datetime"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": f'label[for="{self.field_name}"]',
            "now_button": "button",
            "date": f'input[name="{self.field_name}_date"]',
            "date_placeholder": 'input[placeholder="YYYY-MM-DD"]',
            "time": f'input[name="{self.field_name}_time"]',
            "time_placeholder": 'input[placeholder="HH:MM:SS am/pm"]',
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["now_button", "date", "date_placeholder", "time", "time_placeholder"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._fill_inputs(browser, {"date": values["date"], "time": values["time"]})

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._assert_values(browser, {"date": values["date"], "time": values["time"]})
