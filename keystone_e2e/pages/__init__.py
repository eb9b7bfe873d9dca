"""Admin UI page objects."""

from .app import AdminUIApp
from .base import FieldCommandsMixin, FormFieldCommandsMixin, PageObject
from .confirmations import AdminUIDeleteConfirmation, AdminUIResetConfirmation
from .home_screen import AdminUIHomeScreen, HomeScreenGroup, HomeScreenTab, TabSpec
from .initial_form import AdminUIInitialForm
from .item_screen import AdminUIItemScreen
from .list_screen import AdminUIListScreen
from .registry import AdminUI, load_page_objects
from .signin import AdminUISignin

__all__ = [
    "AdminUI",
    "AdminUIApp",
    "AdminUIDeleteConfirmation",
    "AdminUIHomeScreen",
    "AdminUIInitialForm",
    "AdminUIItemScreen",
    "AdminUIListScreen",
    "AdminUIResetConfirmation",
    "AdminUISignin",
    "FieldCommandsMixin",
    "FormFieldCommandsMixin",
    "HomeScreenGroup",
    "HomeScreenTab",
    "PageObject",
    "TabSpec",
    "load_page_objects",
]
