"""Base classes for field test objects.

A field test object knows the selectors of one admin UI widget (a boolean
checkbox, a markdown editor, ...) and implements the same set of commands
for all of them: visibility and DOM assertions on the edit form, filling and
checking inputs, and assertions on the rendered value in a list screen row.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type

from ..browser import Browser
from ..errors import FieldSpecError
from ..utils import titlecase


Options = Optional[Mapping[str, Any]]

DEFAULT_LIST_SCREEN_ELEMENTS = {
    "ui": "a.ItemList__value",
    "value": "a.ItemList__value",
    "link": "a",
}


def join_selector(*parts: Optional[str]) -> str:
    return " ".join(part for part in parts if part)


class FieldTestObject(abc.ABC):
    """Commands for one field of one model.

    Subclasses declare `field_type` (used in the default form selector),
    the `elements` of the widget and which of them make up its UI.
    """

    field_type = ""
    label_element: Optional[str] = "label"

    def __init__(self, field_name: str, form_selector: str = ""):
        self.field_name = field_name
        self.form_selector = form_selector

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field_name!r}, {self.form_selector!r})"

    @property
    def selector(self) -> str:
        return f'.field-type-{self.field_type}[for="{self.field_name}"]'

    @property
    @abc.abstractmethod
    def elements(self) -> Dict[str, str]:
        """Element name -> selector, relative to the field."""

    @property
    def list_screen_elements(self) -> Dict[str, str]:
        return dict(DEFAULT_LIST_SCREEN_ELEMENTS)

    @property
    def label_text(self) -> str:
        return titlecase(self.field_name)

    @property
    def field_selector(self) -> str:
        return join_selector(self.form_selector, self.selector)

    def select(self, element: str) -> str:
        """Full selector of a form element."""
        try:
            return join_selector(self.form_selector, self.selector, self.elements[element])
        except KeyError:
            raise FieldSpecError(f"{type(self).__name__}: unknown element {element!r}") from None

    def select_list(self, element: str) -> str:
        """Full selector of a list screen element."""
        try:
            return join_selector(self.form_selector, self.list_screen_elements[element])
        except KeyError:
            raise FieldSpecError(f"{type(self).__name__}: unknown list element {element!r}") from None

    @abc.abstractmethod
    def ui_elements(self, options: Options = None) -> List[str]:
        """Names of the elements (besides the label) that make up the widget."""

    # ------------------------------------------------------------------
    # Edit form
    # ------------------------------------------------------------------

    def assert_field_ui_visible(self, browser: Browser, options: Options = None) -> None:
        if self.label_element:
            label = self.select(self.label_element)
            browser.expect_visible(label)
            browser.expect_text_equals(label, self.label_text)
        for element in self.ui_elements(options):
            browser.expect_visible(self.select(element))

    def assert_field_ui_not_visible(self, browser: Browser, options: Options = None) -> None:
        if self.label_element:
            browser.expect_not_visible(self.select(self.label_element))
        for element in self.ui_elements(options):
            browser.expect_not_visible(self.select(element))

    def assert_field_dom_present(self, browser: Browser, options: Options = None) -> None:
        if self.label_element:
            browser.expect_present(self.select(self.label_element))
        for element in self.ui_elements(options):
            browser.expect_present(self.select(element))

    def assert_field_dom_not_present(self, browser: Browser, options: Options = None) -> None:
        if self.label_element:
            browser.expect_not_present(self.select(self.label_element))
        for element in self.ui_elements(options):
            browser.expect_not_present(self.select(element))

    def click_field_ui(self, browser: Browser, element: str, options: Options = None) -> None:
        browser.click(self.select(element))

    @abc.abstractmethod
    def fill_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        """Enter values into the widget."""

    @abc.abstractmethod
    def assert_field_inputs(self, browser: Browser, values: Mapping[str, Any], options: Options = None) -> None:
        """Check the widget holds values."""

    def _fill_inputs(self, browser: Browser, values: Mapping[str, Any]) -> None:
        """Clear and type each element -> value pair."""
        for element, value in values.items():
            selector = self.select(element)
            browser.clear_value(selector)
            browser.set_value(selector, str(value))

    def _assert_values(self, browser: Browser, values: Mapping[str, Any]) -> None:
        for element, expected in values.items():
            selector = self.select(element)
            browser.assert_equal(
                browser.get_value(selector), str(expected),
                f"{self.field_name}: value of <{selector}>",
            )

    # ------------------------------------------------------------------
    # List screen
    # ------------------------------------------------------------------

    def assert_list_screen_field_ui_visible(self, browser: Browser, options: Options = None) -> None:
        browser.expect_visible(self.select_list("ui"))

    def assert_list_screen_field_ui_not_visible(self, browser: Browser, options: Options = None) -> None:
        browser.expect_not_visible(self.select_list("ui"))

    def assert_list_screen_field_ui_present(self, browser: Browser, options: Options = None) -> None:
        browser.expect_present(self.select_list("ui"))

    def assert_list_screen_field_ui_not_present(self, browser: Browser, options: Options = None) -> None:
        browser.expect_not_present(self.select_list("ui"))

    def assert_list_screen_field_value_equals(self, browser: Browser, value: str, options: Options = None) -> None:
        browser.expect_text_equals(self.select_list("value"), value)

    def assert_list_screen_field_value_contains(self, browser: Browser, value: str, options: Options = None) -> None:
        browser.expect_text_contains(self.select_list("value"), value)

    def click_list_screen_field_value(self, browser: Browser, options: Options = None) -> None:
        browser.click(self.select_list("link"))


class ModelTestConfig:
    """Maps the field names of one model to their field test objects.

    Subclasses declare the fields:

        class UserModelTestConfig(ModelTestConfig):
            fields = {"name": NameFieldTestObject, "isAdmin": BooleanFieldTestObject}
    """

    fields: Dict[str, Type[FieldTestObject]] = {}

    def __init__(self, form_selector: str = ""):
        self.form_selector = form_selector

    def field(self, name: str) -> FieldTestObject:
        """Build the field test object for name, bound to this form."""
        field_class = self.fields.get(name)
        if field_class is None:
            raise FieldSpecError(f"{type(self).__name__}: invalid field name {name!r}")
        return field_class(name, self.form_selector)

    def __getitem__(self, name: str) -> FieldTestObject:
        return self.field(name)

    def __contains__(self, name: str) -> bool:
        return name in self.fields


@dataclass
class FieldSpec:
    """One field argument to a page object field command.

    Attributes:
        name: Field name in the model.
        input: Values for fill_field_inputs / assert_field_inputs.
        options: Options passed through to the field command.
        value: Expected list screen value.
        row: List screen row (1-based).
        column: List screen column (1-based).
        click: Element to click for click_field_ui.
        model_test_config: ModelTestConfig subclass, overriding the page
            default.
    """
    name: str
    input: Optional[Mapping[str, Any]] = None
    options: Optional[Mapping[str, Any]] = None
    value: Optional[str] = None
    row: Optional[int] = None
    column: Optional[int] = None
    click: Optional[str] = None
    model_test_config: Optional[Type[ModelTestConfig]] = None
