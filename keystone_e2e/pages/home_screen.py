"""Home screen dashboard: groups of list tabs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from ..browser import Browser
from ..errors import PageObjectError
from ..fields.base import join_selector
from ..utils import key_to_label, key_to_path
from .base import PageObject


@dataclass
class TabSpec:
    """A dashboard tab: the list it links to and its item count text."""
    list_name: str
    items: str


class HomeScreenTab:
    """One list tab inside a dashboard group."""

    elements = {
        "tab_label": ".dashboard-group__list-label",
        "tab_item_count": ".dashboard-group__list-count",
        "tab_plus_icon_link": "a.dashboard-group__list-create.octicon.octicon-plus",
    }

    def __init__(self, list_name: str, items: str, parent_selector: str = ""):
        self.list_name = list_name
        self.items = items
        self.list_path = key_to_path(list_name, plural=True)
        self.list_label = key_to_label(self.list_path)
        self.selector = join_selector(
            parent_selector, f'.dashboard-group__list[data-list-path="{self.list_path}"]'
        )

    def select(self, element: str) -> str:
        try:
            return join_selector(self.selector, self.elements[element])
        except KeyError:
            raise PageObjectError(f"HomeScreenTab: unknown element {element!r}") from None

    def assert_tab_ui_visible(self, browser: Browser) -> None:
        for element in self.elements:
            browser.expect_visible(self.select(element))

    def assert_tab_ui_not_visible(self, browser: Browser) -> None:
        for element in self.elements:
            browser.expect_not_visible(self.select(element))

    def assert_tab_dom_present(self, browser: Browser) -> None:
        for element in self.elements:
            browser.expect_present(self.select(element))

    def assert_tab_dom_not_present(self, browser: Browser) -> None:
        for element in self.elements:
            browser.expect_not_present(self.select(element))

    def assert_tab_text_equals(self, browser: Browser) -> None:
        browser.expect_text_equals(self.select("tab_label"), self.list_label)
        browser.expect_text_equals(self.select("tab_item_count"), self.items)

    def assert_tab_text_contains(self, browser: Browser) -> None:
        browser.expect_text_contains(self.select("tab_label"), self.list_label)
        browser.expect_text_contains(self.select("tab_item_count"), self.items)

    def click_tab_ui(self, browser: Browser, clickable: str, app: Optional[PageObject] = None,
                     wait: bool = True) -> None:
        """Click the label, count or plus icon and wait for the screen it opens."""
        browser.click(self.select(clickable))
        if not wait or app is None:
            return
        if clickable in ("tab_label", "tab_item_count"):
            app.wait_for_list_screen()
        elif clickable == "tab_plus_icon_link":
            app.wait_for_initial_form_screen()


class HomeScreenGroup:
    """A dashboard group and its tabs, keyed by list name."""

    elements = {
        "group_heading": ".dashboard-group__heading",
    }

    def __init__(self, group_name: str, tabs: Iterable[Union[TabSpec, Mapping[str, Any]]]):
        self.group_name = group_name
        self.selector = f'.dashboard-group[data-section-label="{group_name}"]'
        self.tabs: Dict[str, HomeScreenTab] = {}
        for tab in tabs:
            if not isinstance(tab, TabSpec):
                tab = TabSpec(list_name=tab.get("list_name"), items=tab.get("items"))
            if not tab.list_name:
                raise PageObjectError(f"HomeScreenGroup {group_name}: no tab list name specified")
            if not tab.items:
                raise PageObjectError(f"HomeScreenGroup {group_name}: no tab items specified")
            self.tabs[tab.list_name] = HomeScreenTab(tab.list_name, tab.items, self.selector)

    @property
    def heading(self) -> str:
        return join_selector(self.selector, self.elements["group_heading"])

    def assert_group_ui_visible(self, browser: Browser) -> None:
        browser.expect_visible(self.heading)
        for tab in self.tabs.values():
            tab.assert_tab_ui_visible(browser)

    def assert_group_ui_not_visible(self, browser: Browser) -> None:
        browser.expect_not_visible(self.heading)
        for tab in self.tabs.values():
            tab.assert_tab_ui_not_visible(browser)

    def assert_group_dom_present(self, browser: Browser) -> None:
        browser.expect_present(self.heading)
        for tab in self.tabs.values():
            tab.assert_tab_dom_present(browser)

    def assert_group_dom_not_present(self, browser: Browser) -> None:
        browser.expect_not_present(self.heading)
        for tab in self.tabs.values():
            tab.assert_tab_dom_not_present(browser)

    def assert_group_text_equals(self, browser: Browser) -> None:
        for tab in self.tabs.values():
            tab.assert_tab_text_equals(browser)

    def assert_group_text_contains(self, browser: Browser) -> None:
        for tab in self.tabs.values():
            tab.assert_tab_text_contains(browser)

    def tab(self, list_name: str) -> HomeScreenTab:
        try:
            return self.tabs[list_name]
        except KeyError:
            raise PageObjectError(
                f"HomeScreenGroup {self.group_name}: no tab list name found matching {list_name!r}"
            ) from None


class AdminUIHomeScreen(PageObject):
    """The dashboard. Groups are registered per app with add_group()."""

    elements = {
        "dashboard_header": ".dashboard-heading",
    }

    def __init__(self, browser: Browser, app: Optional[PageObject] = None):
        super().__init__(browser, app)
        self.groups: Dict[str, HomeScreenGroup] = {}

    def add_group(self, group_name: str, tabs: Iterable[Union[TabSpec, Mapping[str, Any]]]) -> HomeScreenGroup:
        group = HomeScreenGroup(group_name, tabs)
        self.groups[group_name] = group
        return group

    def group(self, group_name: str) -> HomeScreenGroup:
        try:
            return self.groups[group_name]
        except KeyError:
            raise PageObjectError(f"AdminUIHomeScreen: unknown dashboard group {group_name!r}") from None

    def click_tab_ui(self, group_name: str, list_name: str, clickable: str, wait: bool = True) -> None:
        self.group(group_name).tab(list_name).click_tab_ui(self.browser, clickable, self.app, wait)
