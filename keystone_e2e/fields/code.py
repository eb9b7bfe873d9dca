"""Code (CodeMirror) field."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


SET_VALUE_SCRIPT = (
    "document.querySelector(arguments[0])"
    ".getElementsByClassName('CodeMirror')[0].CodeMirror.setValue(arguments[1]);"
)
GET_VALUE_SCRIPT = (
    "return document.querySelector(arguments[0])"
    ".getElementsByClassName('CodeMirror')[0].CodeMirror.getValue();"
)


class CodeFieldTestObject(FieldTestObject):
    field_type = "code"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": f'label[for="{self.field_name}"]',
            "line_number": ".CodeMirror-gutter-wrapper > .CodeMirror-linenumber",
            "code_mirror": ".CodeMirror-container",
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["line_number", "code_mirror"]

    def assert_field_ui_visible(self, browser: Browser, options: Options = None) -> None:
        super().assert_field_ui_visible(browser, options)
        browser.expect_text_equals(self.select("line_number"), "1")

    def assert_field_dom_present(self, browser: Browser, options: Options = None) -> None:
        super().assert_field_dom_present(browser, options)
        browser.expect_text_equals(self.select("line_number"), "1")

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        browser.execute_script(SET_VALUE_SCRIPT, self.field_selector, values["value"])

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        actual = browser.execute_script(GET_VALUE_SCRIPT, self.field_selector)
        browser.assert_equal(actual, values["value"], f"{self.field_name}: code editor value")
