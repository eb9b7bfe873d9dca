"""Array fields: a list of text inputs with add and delete buttons."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


class _ArrayFieldTestObject(FieldTestObject):
    """Shared behaviour of DateArray and TextArray.

    Inputs are named <prefix>1, <prefix>2 with <prefix>1_delete buttons;
    options[inputs_option] lists the ones expected on screen.
    """

    input_prefix = ""
    inputs_option = ""
    input_count = 2

    @property
    def elements(self) -> Dict[str, str]:
        elements = {
            "label": f'label[for="{self.field_name}"]',
            "add_button": ".Button--default",
        }
        for n in range(1, self.input_count + 1):
            elements[f"{self.input_prefix}{n}"] = f'.FormField:nth-of-type({n}) input[type="text"]'
            elements[f"{self.input_prefix}{n}_delete"] = f".FormField:nth-of-type({n}) .Button--link-cancel"
        return elements

    def ui_elements(self, options: Options = None) -> List[str]:
        names = ["add_button"]
        for name in (options or {}).get(self.inputs_option, []):
            names += [name, f"{name}_delete"]
        return names

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._fill_inputs(browser, values)

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._assert_values(browser, values)


class DateArrayFieldTestObject(_ArrayFieldTestObject):
    field_type = "datearray"
    input_prefix = "date"
    inputs_option = "date_inputs"


class TextArrayFieldTestObject(_ArrayFieldTestObject):
    field_type = "textarray"
    input_prefix = "text"
    inputs_option = "text_inputs"
