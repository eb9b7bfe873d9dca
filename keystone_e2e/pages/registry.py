"""Page object registry and loading of project page objects.

Projects can ship their own PageObject subclasses in directories listed in
KNE_PAGE_OBJECT_PATHS. Each .py file there is imported and the PageObject
subclasses it defines become available through AdminUI.page(name).
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Type, Union

from ..browser import Browser
from ..config import PAGE_OBJECTS_PATH
from ..errors import PageObjectError
from .app import AdminUIApp
from .base import PageObject
from .confirmations import AdminUIDeleteConfirmation, AdminUIResetConfirmation
from .home_screen import AdminUIHomeScreen
from .initial_form import AdminUIInitialForm
from .item_screen import AdminUIItemScreen
from .list_screen import AdminUIListScreen
from .signin import AdminUISignin


logger = logging.getLogger(__name__)


def _module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:10]
    return f"keystone_e2e_page_objects_{path.stem}_{digest}"


def _load_module(path: Path):
    name = _module_name(path)
    if name in sys.modules:
        return sys.modules[name]
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise PageObjectError(f"Unable to load page objects from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        del sys.modules[name]
        raise
    return module


def load_page_objects(paths: Iterable[Union[str, Path]]) -> Dict[str, Type[PageObject]]:
    """Import PageObject subclasses from page object directories.

    The bundled page objects directory is skipped, its classes are always
    available.

    Returns:
        Class name -> class, later directories overriding earlier ones.
    """
    bundled = PAGE_OBJECTS_PATH.resolve()
    found: Dict[str, Type[PageObject]] = {}

    for entry in paths:
        directory = Path(entry).expanduser().resolve()
        if directory == bundled:
            continue
        if not directory.is_dir():
            raise PageObjectError(f"Page object path is not a directory: {directory}")

        for path in sorted(directory.glob("*.py")):
            if path.name.startswith("_"):
                continue
            module = _load_module(path)
            for name, obj in inspect.getmembers(module, inspect.isclass):
                if issubclass(obj, PageObject) and obj.__module__ == module.__name__:
                    found[name] = obj
                    logger.debug("loaded page object %s from %s", name, path)
    return found


class AdminUI:
    """All admin UI page objects for one browser session."""

    def __init__(
        self,
        browser: Browser,
        host: str = "localhost",
        port: int = 3000,
        extra_page_objects: Optional[Dict[str, Type[PageObject]]] = None,
    ):
        self.browser = browser
        self.app = AdminUIApp(browser, host, port)
        self.signin = AdminUISignin(browser, self.app)
        self.home_screen = AdminUIHomeScreen(browser, self.app)
        self.list_screen = AdminUIListScreen(browser, self.app)
        self.item_screen = AdminUIItemScreen(browser, self.app)
        self.initial_form = AdminUIInitialForm(browser, self.app)
        self.delete_confirmation = AdminUIDeleteConfirmation(browser, self.app)
        self.reset_confirmation = AdminUIResetConfirmation(browser, self.app)
        self._page_classes = dict(extra_page_objects or {})
        self._pages: Dict[str, PageObject] = {}

    def page(self, name: str) -> PageObject:
        """A project page object by class name, bound to this session."""
        if name not in self._pages:
            page_class = self._page_classes.get(name)
            if page_class is None:
                raise PageObjectError(f"Unknown page object: {name}")
            self._pages[name] = page_class(self.browser, self.app)
        return self._pages[name]
