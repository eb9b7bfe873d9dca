"""pytest plugin loaded into the test runner child process.

The launcher passes everything through KNE_* environment variables; this
plugin turns them into session fixtures: settings, an optional Selenium
server, a remote WebDriver session and the admin UI page objects.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Iterator, Mapping, Optional

import pytest
from selenium import webdriver

from .browser import Browser
from .config import (
    DEFAULT_APP_HOST,
    DEFAULT_APP_PORT,
    ENV_APP_HOST,
    ENV_APP_PORT,
    ENV_BROWSER_NAME,
    ENV_BROWSER_VERSION,
    ENV_PAGE_OBJECT_PATHS,
    ENV_SELENIUM_SERVER,
    ENV_SELENIUM_START_PROCESS,
    ENV_TEST_ENV,
    ENV_TUNNEL_ID,
    E2ESettings,
    EnvironmentSettings,
    load_settings,
    split_paths,
)
from .errors import ConfigurationError
from .pages import AdminUI, load_page_objects
from .selenium_server import SeleniumServer


logger = logging.getLogger(__name__)

BROWSER_OPTIONS = {
    "firefox": webdriver.FirefoxOptions,
    "chrome": webdriver.ChromeOptions,
    "microsoftedge": webdriver.EdgeOptions,
    "edge": webdriver.EdgeOptions,
    "safari": webdriver.SafariOptions,
    "internet explorer": webdriver.IeOptions,
}


def build_options(environment: EnvironmentSettings, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Build WebDriver options from an environment's desired capabilities.

    KNE_BROWSER_NAME and KNE_BROWSER_VERSION override the configured
    browser. Sauce environments get the Travis tunnel identifier.
    """
    environ = os.environ if environ is None else environ
    caps = dict(environment.desired_capabilities)

    configured_name = caps.pop("browserName", "firefox")
    browser_name = (environ.get(ENV_BROWSER_NAME) or configured_name).lower()
    options_class = BROWSER_OPTIONS.get(browser_name)
    if options_class is None:
        raise ConfigurationError(f"Unsupported browser: {browser_name}")
    options = options_class()

    configured_version = caps.pop("browserVersion", None) or caps.pop("version", None)
    version = environ.get(ENV_BROWSER_VERSION) or configured_version
    if version:
        options.browser_version = str(version)

    platform = caps.pop("platformName", None) or caps.pop("platform", None)
    if platform:
        options.platform_name = platform

    sauce_options = dict(caps.pop("sauce:options", {}))
    if environment.sauce:
        tunnel_id = environ.get(ENV_TUNNEL_ID)
        if tunnel_id:
            sauce_options["tunnelIdentifier"] = tunnel_id
            sauce_options.setdefault("build", tunnel_id)
    if sauce_options:
        options.set_capability("sauce:options", sauce_options)

    for key, value in caps.items():
        options.set_capability(key, value)
    return options


def app_address_from_env(environ: Optional[Mapping[str, str]] = None):
    environ = os.environ if environ is None else environ
    return environ.get(ENV_APP_HOST, DEFAULT_APP_HOST), int(environ.get(ENV_APP_PORT, DEFAULT_APP_PORT))


def pytest_report_header(config):
    env = os.environ.get(ENV_TEST_ENV, "default")
    browser = os.environ.get(ENV_BROWSER_NAME, "")
    return f"keystone-e2e: env={env} browser={browser or '(configured)'}"


@pytest.fixture(scope="session")
def e2e_settings() -> E2ESettings:
    return load_settings()


@pytest.fixture(scope="session")
def e2e_environment(e2e_settings: E2ESettings) -> EnvironmentSettings:
    return e2e_settings.get_environment(os.environ.get(ENV_TEST_ENV, "default"))


@pytest.fixture(scope="session")
def selenium_server(e2e_settings: E2ESettings) -> Iterator[Optional[SeleniumServer]]:
    """Selenium server for the session, when the launcher did not start one."""
    if os.environ.get(ENV_SELENIUM_START_PROCESS) != "true":
        yield None
        return

    selenium = e2e_settings.selenium
    server = SeleniumServer(
        jar_path=os.environ.get(ENV_SELENIUM_SERVER) or selenium.server_path,
        java=selenium.java,
        ready_line=selenium.ready_line,
        ready_timeout=selenium.ready_timeout,
    )
    server.start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture(scope="session")
def driver(e2e_environment: EnvironmentSettings, selenium_server) -> Iterator[Any]:
    """Remote WebDriver session shared by the whole run."""
    options = build_options(e2e_environment)
    session = webdriver.Remote(command_executor=e2e_environment.remote_url(), options=options)
    try:
        yield session
    finally:
        session.quit()


@pytest.fixture(scope="session")
def browser(driver, e2e_environment: EnvironmentSettings) -> Browser:
    return Browser(driver, wait_timeout=e2e_environment.wait_timeout)


@pytest.fixture(scope="session")
def admin_ui(browser: Browser) -> AdminUI:
    host, port = app_address_from_env()
    extra = load_page_objects(split_paths(os.environ.get(ENV_PAGE_OBJECT_PATHS)))
    return AdminUI(browser, host, port, extra_page_objects=extra)
