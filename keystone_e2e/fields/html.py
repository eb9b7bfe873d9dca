"""Html field: a plain textarea, or a TinyMCE editor in an iframe."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


EDITOR_BODY = (
    "document.querySelector(arguments[0]).querySelector('iframe')"
    ".contentDocument.querySelector('.mce-content-body')"
)
SET_CONTENT_SCRIPT = EDITOR_BODY + ".innerHTML = arguments[1];"
GET_CONTENT_SCRIPT = "return " + EDITOR_BODY + ".innerHTML;"


def _wysiwyg(values: Mapping[str, Any], options: Options) -> bool:
    if options and options.get("wysiwyg"):
        return True
    return bool((values.get("options") or {}).get("wysiwyg"))


class HtmlFieldTestObject(FieldTestObject):
    field_type = "html"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": ".FormLabel",
            "value": f'textarea[name="{self.field_name}"]',
            "wysiwyg": "iframe",
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        if options and options.get("wysiwyg"):
            return ["wysiwyg"]
        return ["value"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        if _wysiwyg(values, options):
            browser.click(self.select("wysiwyg"))
            browser.execute_script(SET_CONTENT_SCRIPT, self.field_selector, values["value"])
        else:
            self._fill_inputs(browser, {"value": values["value"]})

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        if _wysiwyg(values, options):
            browser.wait_for_visible(self.select("wysiwyg"))
            actual = browser.execute_script(GET_CONTENT_SCRIPT, self.field_selector)
            browser.assert_equal(actual, values["value"], f"{self.field_name}: editor content")
        else:
            browser.wait_for_visible(self.select("value"))
            self._assert_values(browser, {"value": values["value"]})
