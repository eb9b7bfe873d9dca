"""List screen: the item table of one list."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

from ..errors import FieldSpecError, PageObjectError
from ..fields.base import FieldSpec, FieldTestObject
from .base import FieldArg, FieldCommandsMixin, PageObject


Cell = Union[Mapping[str, Any], FieldSpec]


def item_field_selector(row: int, column: int) -> str:
    return f".ItemList-wrapper tbody tr:nth-of-type({row}) td:nth-of-type({column})"


def item_delete_icon_selector(row: int, column: int) -> str:
    return item_field_selector(row, column) + " button"


def item_list_header_selector(column: int) -> str:
    # The first column holds the delete icons and has no header text
    return f".ItemList-wrapper thead th:nth-of-type({column + 1})"


def _cell(spec: Cell) -> Tuple[Optional[int], Optional[int]]:
    if isinstance(spec, FieldSpec):
        return spec.row, spec.column
    return spec.get("row"), spec.get("column")


class AdminUIListScreen(FieldCommandsMixin, PageObject):
    elements = {
        "no_items_found_text": ".BlankState__heading",
        "item_delete_icon": ".Table.ItemList .ItemList__col--control.ItemList__col--delete",
        "search_input_field": "[data-search-input-field]",
        "search_input_field_clear_icon": "[data-search-input-field-clear-icon]",
        "filter_dropdown": "#listHeaderFilterButton",
        "column_selection_dropdown": "#listHeaderColumnButton",
        "download_dropdown": "#listHeaderDownloadButton",
        "expand_table_icon": "div.InputGroup_section:nth-child(5) > button:nth-child(1)",
        "create_item_button": "button[data-e2e-list-create-button]",
        "page_item_count": ".Pagination__count",
    }

    def click_search_input_clear_icon(self) -> None:
        self.click_element("search_input_field_clear_icon")

    def click_create_item_button(self, wait: bool = True) -> None:
        self.click_element("create_item_button")
        if wait and self.app is not None:
            self.app.wait_for_initial_form_screen()

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def assert_item_list_header_visible(self, column: int) -> None:
        self.browser.expect_visible(item_list_header_selector(column))

    def assert_item_list_header_equals(self, column: int, value: str) -> None:
        self.browser.expect_text_equals(item_list_header_selector(column), value)

    def assert_item_list_header_contains(self, column: int, value: str) -> None:
        self.browser.expect_text_contains(item_list_header_selector(column), value)

    # ------------------------------------------------------------------
    # Item fields
    # ------------------------------------------------------------------

    def _row_fields(self, fields: Optional[Iterable[FieldArg]], command: str) -> Iterator[Tuple[FieldSpec, FieldTestObject]]:
        for spec in self._field_specs(fields, command):
            if not spec.row or not spec.column:
                raise FieldSpecError(f"AdminUIListScreen.{command}: invalid field config row/column")
            yield spec, self._bind(spec, item_field_selector(spec.row, spec.column), command)

    def assert_item_field_ui_visible(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._row_fields(fields, "assert_item_field_ui_visible"):
            field.assert_list_screen_field_ui_visible(self.browser, spec.options)

    def assert_item_field_ui_not_visible(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._row_fields(fields, "assert_item_field_ui_not_visible"):
            field.assert_list_screen_field_ui_not_visible(self.browser, spec.options)

    def assert_item_field_ui_present(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._row_fields(fields, "assert_item_field_ui_present"):
            field.assert_list_screen_field_ui_present(self.browser, spec.options)

    def assert_item_field_ui_not_present(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._row_fields(fields, "assert_item_field_ui_not_present"):
            field.assert_list_screen_field_ui_not_present(self.browser, spec.options)

    def assert_item_field_value_equals(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._row_fields(fields, "assert_item_field_value_equals"):
            field.assert_list_screen_field_value_equals(self.browser, spec.value, spec.options)

    def assert_item_field_value_contains(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._row_fields(fields, "assert_item_field_value_contains"):
            field.assert_list_screen_field_value_contains(self.browser, spec.value, spec.options)

    def click_item_field_value(self, fields: Iterable[FieldArg]) -> None:
        for spec, field in self._row_fields(fields, "click_item_field_value"):
            field.click_list_screen_field_value(self.browser, spec.options)

    # ------------------------------------------------------------------
    # Delete icons
    # ------------------------------------------------------------------

    def _icon_selectors(self, icons: Optional[Iterable[Cell]]) -> Iterator[str]:
        if not icons:
            raise PageObjectError("AdminUIListScreen: invalid icons specification")
        for icon in icons:
            row, column = _cell(icon)
            if not row or not column:
                raise PageObjectError("AdminUIListScreen: invalid icon config row/column")
            yield item_delete_icon_selector(row, column)

    def assert_item_delete_icon_visible(self, icons: Iterable[Cell]) -> None:
        for selector in self._icon_selectors(icons):
            self.browser.expect_visible(selector)

    def click_delete_item_icon(self, icons: Iterable[Cell]) -> None:
        for selector in self._icon_selectors(icons):
            self.browser.click(selector)
