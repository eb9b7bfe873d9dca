"""File upload field."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


class FileFieldTestObject(FieldTestObject):
    field_type = "file"

    @property
    def selector(self) -> str:
        return f"[data-field-name={self.field_name}][data-field-type=file]"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": f'label[for="{self.field_name}"]',
            "button": "button",
            "file_input": 'input[type="file"]',
            "filename": ".FileChangeMessage",
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["button"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        """Upload values["path"] through the hidden file input."""
        path = Path(values["path"]).resolve()
        browser.upload(self.select("file_input"), str(path))

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        browser.expect_text_contains(self.select("filename"), Path(values["path"]).name)
