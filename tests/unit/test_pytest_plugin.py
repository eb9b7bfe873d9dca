"""Unit tests for pytest_plugin.py helpers."""

from __future__ import annotations

import pytest
from selenium import webdriver

from keystone_e2e.config import EnvironmentSettings
from keystone_e2e.errors import ConfigurationError
from keystone_e2e.pytest_plugin import app_address_from_env, build_options


class TestBuildOptions:
    """Desired capabilities to WebDriver options."""

    def test_configured_browser(self):
        env = EnvironmentSettings(name="default", desired_capabilities={"browserName": "firefox"})
        options = build_options(env, {})
        assert isinstance(options, webdriver.FirefoxOptions)

    def test_env_overrides_browser(self):
        env = EnvironmentSettings(name="default", desired_capabilities={"browserName": "firefox"})
        options = build_options(env, {"KNE_BROWSER_NAME": "chrome", "KNE_BROWSER_VERSION": "99"})
        assert isinstance(options, webdriver.ChromeOptions)
        assert options.capabilities["browserVersion"] == "99"

    def test_unsupported_browser(self):
        env = EnvironmentSettings(name="default", desired_capabilities={"browserName": "netscape"})
        with pytest.raises(ConfigurationError, match="Unsupported browser: netscape"):
            build_options(env, {})

    def test_sauce_tunnel_identifier(self):
        env = EnvironmentSettings(
            name="saucelabs-travis",
            sauce=True,
            desired_capabilities={"browserName": "chrome", "platformName": "Windows 10", "acceptInsecureCerts": True},
        )
        options = build_options(env, {"TRAVIS_JOB_NUMBER": "12.3"})
        caps = options.capabilities
        assert caps["platformName"] == "Windows 10"
        assert caps["sauce:options"] == {"tunnelIdentifier": "12.3", "build": "12.3"}
        assert caps["acceptInsecureCerts"] is True

    def test_no_sauce_options_for_local(self):
        env = EnvironmentSettings(name="default", desired_capabilities={"browserName": "chrome"})
        options = build_options(env, {"TRAVIS_JOB_NUMBER": "12.3"})
        assert "sauce:options" not in options.capabilities


def test_app_address_from_env():
    assert app_address_from_env({}) == ("localhost", 3000)
    assert app_address_from_env({"KNE_APP_HOST": "10.0.0.2", "KNE_APP_PORT": "4000"}) == ("10.0.0.2", 4000)
