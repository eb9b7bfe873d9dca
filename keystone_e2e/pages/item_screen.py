"""Edit item screen."""

from __future__ import annotations

from .base import FormFieldCommandsMixin, PageObject


class AdminUIItemScreen(FormFieldCommandsMixin, PageObject):
    form_selector = ".keystone-body .EditForm-container"
    form_elements = {
        "save_button": "button[data-button=update]",
        "reset_button": "button[data-button=reset]",
        "delete_button": "button[data-button=delete]",
    }

    elements = {
        "list_breadcrumb": 'a[data-e2e-editform-header-back="true"]',
        "search_input_icon": '.EditForm__header__search input[class="FormInput EditForm__header__search-input"]',
        "new_item_button": '.Toolbar__section button[data-e2e-item-create-button="true"]',
        "flash_message": ".Alert--success",
        "flash_error": ".Alert--danger",
        "read_only_name_header": ".EditForm__name-field h2",
        "editable_name_header": '.EditForm__name-field input[class*="item-name-field"]',
        "id_label": '.EditForm__key-or-id span[class="EditForm__key-or-id__label"]',
        "id_value": '.EditForm__key-or-id span[class="EditForm__key-or-id__field"]',
        "meta_header": '.EditForm h3[class="form-heading"]',
        "meta_created_at_label": '.EditForm .FormField[for="createdAt"] label[for="createdAt"]',
        "meta_created_at_value": '.EditForm .FormField[for="createdAt"] .FormInput-noedit',
        "meta_created_by_label": '.EditForm .FormField[for="createdBy"] label[for="createdBy"]',
        "meta_created_by_value": '.EditForm .FormField[for="createdBy"] .FormInput-noedit',
        "meta_updated_at_label": '.EditForm .FormField[for="updatedAt"] label[for="updatedAt"]',
        "meta_updated_at_value": '.EditForm .FormField[for="updatedAt"] .FormInput-noedit',
        "meta_updated_by_label": '.EditForm .FormField[for="updatedBy"] label[for="updatedBy"]',
        "meta_updated_by_value": '.EditForm .FormField[for="updatedBy"] .FormInput-noedit',
        "save_button": ".EditForm-container button[data-button=update]",
        "reset_button": ".EditForm-container button[data-button=reset]",
        "reset_button_text": ".EditForm-container button[data-button=reset] span",
        "delete_button": ".EditForm-container button[data-button=delete]",
        "delete_button_text": ".EditForm-container button[data-button=delete] span",
        # TODO: match any relationship item link, not only the first table cell
        "first_relationship_item_link": "div.Relationships > div > div > div > table > tbody > tr > td > a",
    }

    def back(self) -> None:
        self.click_element("list_breadcrumb")

    def new(self) -> None:
        self.click_element("new_item_button")

    def save(self) -> None:
        self.browser.click(self.form_element("save_button"))

    def reset(self) -> None:
        self.browser.click(self.form_element("reset_button"))

    def delete(self) -> None:
        self.browser.click(self.form_element("delete_button"))
