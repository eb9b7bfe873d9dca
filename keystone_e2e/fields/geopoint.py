"""GeoPoint field: latitude and longitude inputs."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..browser import Browser
from .base import FieldTestObject, Options


class GeoPointFieldTestObject(FieldTestObject):
    field_type = "geopoint"

    @property
    def elements(self) -> Dict[str, str]:
        return {
            "label": f'label[for="{self.field_name}"]',
            "value_lat": f'input[name="{self.field_name}[1]"][placeholder="Latitude"]',
            "value_lng": f'input[name="{self.field_name}[0]"][placeholder="Longitude"]',
        }

    def ui_elements(self, options: Options = None) -> List[str]:
        return ["value_lat", "value_lng"]

    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        self._fill_inputs(browser, {"value_lat": values["lat"], "value_lng": values["lng"]})

    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        browser.wait_for_visible(self.select("value_lat"))
        browser.wait_for_visible(self.select("value_lng"))
        self._assert_values(browser, {"value_lat": values["lat"], "value_lng": values["lng"]})
