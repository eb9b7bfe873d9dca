"""Markdown field: textarea with a formatting toolbar and preview."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


TOOLBAR_BUTTONS = {
    "bold": "Bold",
    "italic": "Italic",
    "h1": "Heading 1",
    "h2": "Heading 2",
    "h3": "Heading 3",
    "h4": "Heading 4",
    "link": "URL/Link",
    "image": "Image",
    "ul": "Unordered List",
    "ol": "Ordered List",
    "quote": "Quote",
    "code": "Code",
    "preview_toggle": "Preview",
}

PREVIEW_HTML_SCRIPT = "return document.querySelector(arguments[0]).innerHTML;"


class MarkdownFieldTestObject(FieldTestObject):
    field_type = "markdown"

    @property
    def elements(self) -> Dict[str, str]:
        elements = {
            "label": f'label[for="{self.field_name}"]',
            "value": f'textarea[name="{self.field_name}.md"]',
        }
        for name, title in TOOLBAR_BUTTONS.items():
            elements[name] = f'button[title="{title}"]'
        elements["preview"] = ".md-editor__preview"
        return elements

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["value"] + list(TOOLBAR_BUTTONS)

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._fill_inputs(browser, {"value": values["md"]})

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        """Check the markdown source ("md") or the rendered preview ("html")."""
        if "md" in values:
            browser.wait_for_visible(self.select("value"))
            self._assert_values(browser, {"value": values["md"]})
        elif "html" in values:
            actual = browser.execute_script(PREVIEW_HTML_SCRIPT, self.select("preview"))
            browser.assert_equal(actual, values["html"], f"{self.field_name}: preview html")
