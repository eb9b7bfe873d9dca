"""Page object base classes."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Type, Union

from ..browser import Browser
from ..errors import FieldSpecError, PageObjectError
from ..fields.base import FieldSpec, FieldTestObject, ModelTestConfig, join_selector


FieldArg = Union[FieldSpec, Mapping[str, Any]]


class PageObject:
    """A screen (or part of one) of the admin UI.

    Subclasses list their named selectors in `elements`. Commands that take
    an element name resolve it through element("@name").
    """

    elements: Dict[str, str] = {}

    def __init__(self, browser: Browser, app: Optional["PageObject"] = None):
        self.browser = browser
        self.app = app

    def element(self, ref: str) -> str:
        """Resolve "@name" to its selector; anything else is a raw selector."""
        if not ref.startswith("@"):
            return ref
        name = ref[1:]
        try:
            return self.elements[name]
        except KeyError:
            raise PageObjectError(f"{type(self).__name__}: unknown element {name!r}") from None

    def assert_element_is_visible(self, element: str) -> None:
        self.browser.expect_visible(self.element("@" + element))

    def assert_element_is_not_visible(self, element: str) -> None:
        self.browser.expect_not_visible(self.element("@" + element))

    def assert_element_is_present(self, element: str) -> None:
        self.browser.expect_present(self.element("@" + element))

    def assert_element_is_not_present(self, element: str) -> None:
        self.browser.expect_not_present(self.element("@" + element))

    def assert_element_text_equals(self, element: str, text: str) -> None:
        self.browser.expect_text_equals(self.element("@" + element), text)

    def assert_element_text_not_equals(self, element: str, text: str) -> None:
        self.browser.expect_text_not_equals(self.element("@" + element), text)

    def assert_element_text_contains(self, element: str, text: str) -> None:
        self.browser.expect_text_contains(self.element("@" + element), text)

    def assert_element_has_attribute(self, element: str, attribute: str, value: str) -> None:
        self.browser.expect_attribute_contains(self.element("@" + element), attribute, value)

    def click_element(self, element: str) -> None:
        self.browser.click(self.element("@" + element))


class FieldCommandsMixin:
    """Resolves FieldSpec arguments to bound field test objects."""

    default_model_test_config: Optional[Type[ModelTestConfig]] = None

    def set_default_model_test_config(self, model_test_config: Type[ModelTestConfig]) -> None:
        """Model test config used when a field does not name its own."""
        self.default_model_test_config = model_test_config

    def _field_specs(self, fields: Optional[Iterable[FieldArg]], command: str) -> Iterator[FieldSpec]:
        if not fields:
            raise FieldSpecError(f"{type(self).__name__}.{command}: invalid field specification")
        for field in fields:
            yield field if isinstance(field, FieldSpec) else FieldSpec(**field)

    def _bind(self, spec: FieldSpec, form_selector: str, command: str) -> FieldTestObject:
        model_test_config = spec.model_test_config or self.default_model_test_config
        if model_test_config is None:
            raise FieldSpecError(f"{type(self).__name__}.{command}: no model test config given")
        return model_test_config(form_selector).field(spec.name)


class FormFieldCommandsMixin(FieldCommandsMixin):
    """Field commands for a page holding one edit form (item screen, create form)."""

    form_selector = ""
    form_elements: Dict[str, str] = {}

    def form_element(self, name: str) -> str:
        try:
            return join_selector(self.form_selector, self.form_elements[name])
        except KeyError:
            raise PageObjectError(f"{type(self).__name__}: unknown form element {name!r}") from None

    def _form_fields(self, fields: Optional[Iterable[FieldArg]], command: str) -> Iterator[Tuple[FieldSpec, FieldTestObject]]:
        for spec in self._field_specs(fields, command):
            yield spec, self._bind(spec, self.form_selector, command)

    def assert_field_ui_visible(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._form_fields(fields, "assert_field_ui_visible"):
            field.assert_field_ui_visible(self.browser, spec.options)

    def assert_field_ui_not_visible(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._form_fields(fields, "assert_field_ui_not_visible"):
            field.assert_field_ui_not_visible(self.browser, spec.options)

    def assert_field_dom_present(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._form_fields(fields, "assert_field_dom_present"):
            field.assert_field_dom_present(self.browser, spec.options)

    def assert_field_dom_not_present(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._form_fields(fields, "assert_field_dom_not_present"):
            field.assert_field_dom_not_present(self.browser, spec.options)

    def click_field_ui(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._form_fields(fields, "click_field_ui"):
            if not spec.click:
                raise FieldSpecError(f"{spec.name}: click_field_ui needs an element to click")
            field.click_field_ui(self.browser, spec.click, spec.options)

    def fill_field_inputs(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._form_fields(fields, "fill_field_inputs"):
            field.fill_field_inputs(self.browser, spec.input or {}, spec.options)

    def assert_field_inputs(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._form_fields(fields, "assert_field_inputs"):
            field.assert_field_inputs(self.browser, spec.input or {}, spec.options)
