"""Configuration for keystone-e2e runs.

Two layers:
- Settings: the bundled (or user supplied) e2e.yml describing the Selenium
  server, Sauce Connect and the browser environments, validated against
  schemas/e2e-settings.schema.json.
- Invocation: the values a caller passes for one run (CLI flags or
  start_e2e options), merged into KNE_* environment variables that the
  test runner child process reads back.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from jsonschema import Draft7Validator

from .errors import ConfigurationError


PACKAGE_ROOT = Path(__file__).resolve().parent
SCHEMAS_DIR = PACKAGE_ROOT / "schemas"
DEFAULT_SETTINGS_PATH = PACKAGE_ROOT / "settings" / "e2e.yml"
PAGE_OBJECTS_PATH = PACKAGE_ROOT / "pages"

# Environment variables shared between the launcher and the test runner
ENV_TEST_ENV = "KNE_TEST_ENV"
ENV_BROWSER_NAME = "KNE_BROWSER_NAME"
ENV_BROWSER_VERSION = "KNE_BROWSER_VERSION"
ENV_TEST_PATHS = "KNE_TEST_PATHS"
ENV_PAGE_OBJECT_PATHS = "KNE_PAGE_OBJECT_PATHS"
ENV_EXCLUDE_TEST_PATHS = "KNE_EXCLUDE_TEST_PATHS"
ENV_SELENIUM_SERVER = "KNE_SELENIUM_SERVER"
ENV_SELENIUM_START_PROCESS = "KNE_SELENIUM_START_PROCESS"
ENV_SETTINGS = "KNE_SETTINGS"
ENV_APP_HOST = "KNE_APP_HOST"
ENV_APP_PORT = "KNE_APP_PORT"
ENV_SAUCE_USERNAME = "SAUCE_USERNAME"
ENV_SAUCE_ACCESS_KEY = "SAUCE_ACCESS_KEY"
ENV_TUNNEL_ID = "TRAVIS_JOB_NUMBER"

SAUCE_LOCAL_ENV = "saucelabs-local"
SAUCE_TRAVIS_ENV = "saucelabs-travis"

DEFAULT_APP_HOST = "localhost"
DEFAULT_APP_PORT = 3000


def _read_schema(schema_name: str) -> Dict[str, Any]:
    """Load a JSON schema from the package schemas directory."""
    schema_path = SCHEMAS_DIR / schema_name
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")
    return json.loads(schema_path.read_text(encoding="utf-8"))


def validate_against_schema(data: Any, schema_name: str) -> Tuple[bool, List[str]]:
    """Validate data against a JSON schema.

    Args:
        data: The data to validate
        schema_name: Name of schema file in the schemas/ directory

    Returns:
        Tuple of (is_valid, list_of_error_messages)
    """
    validator = Draft7Validator(_read_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))

    if not errors:
        return True, []

    messages: List[str] = []
    for err in errors[:50]:
        location = ".".join([str(p) for p in err.absolute_path]) or "<root>"
        messages.append(f"{location}: {err.message}")

    if len(errors) > 50:
        messages.append(f"... and {len(errors) - 50} more errors")

    return False, messages


@dataclass
class SeleniumSettings:
    """How to launch the Selenium standalone server."""
    server_path: Optional[str] = "selenium-server-standalone.jar"
    java: str = "java"
    ready_line: str = "Selenium Server is up and running"
    ready_timeout: Optional[float] = None


@dataclass
class SauceConnectSettings:
    """Sauce Connect tunnel options."""
    binary: str = "sc"
    connect_retries: int = 5
    connect_retry_timeout: float = 60
    ready_delay: float = 5
    close_delay: float = 60


@dataclass
class EnvironmentSettings:
    """A single browser environment (the --env value)."""
    name: str
    selenium_host: str = "127.0.0.1"
    selenium_port: int = 4444
    selenium_path: str = "/wd/hub"
    use_ssl: bool = False
    sauce: bool = False
    wait_timeout: float = 10
    desired_capabilities: Dict[str, Any] = field(default_factory=dict)

    def remote_url(self, environ: Optional[Mapping[str, str]] = None) -> str:
        """WebDriver hub URL, with Sauce credentials for Sauce environments."""
        environ = os.environ if environ is None else environ
        scheme = "https" if self.use_ssl else "http"
        auth = ""
        if self.sauce:
            username = environ.get(ENV_SAUCE_USERNAME)
            access_key = environ.get(ENV_SAUCE_ACCESS_KEY)
            if not username or not access_key:
                raise ConfigurationError(
                    f"Environment {self.name} needs {ENV_SAUCE_USERNAME} and {ENV_SAUCE_ACCESS_KEY}"
                )
            auth = f"{username}:{access_key}@"
        path = "/" + self.selenium_path.lstrip("/") if self.selenium_path else ""
        return f"{scheme}://{auth}{self.selenium_host}:{self.selenium_port}{path}"


@dataclass
class E2ESettings:
    """Parsed e2e.yml."""
    path: Path
    raw_data: Dict[str, Any]
    selenium: SeleniumSettings = field(default_factory=SeleniumSettings)
    sauce_connect: SauceConnectSettings = field(default_factory=SauceConnectSettings)
    environments: Dict[str, EnvironmentSettings] = field(default_factory=dict)

    def get_environment(self, name: str) -> EnvironmentSettings:
        """Get settings for an environment name."""
        if name not in self.environments:
            known = ", ".join(sorted(self.environments))
            raise ConfigurationError(f"Unknown test environment: {name} (known: {known})")
        return self.environments[name]


def _parse_selenium(data: Dict[str, Any]) -> SeleniumSettings:
    defaults = SeleniumSettings()
    return SeleniumSettings(
        server_path=data.get("server_path", defaults.server_path),
        java=data.get("java", defaults.java),
        ready_line=data.get("ready_line", defaults.ready_line),
        ready_timeout=data.get("ready_timeout"),
    )


def _parse_sauce_connect(data: Dict[str, Any]) -> SauceConnectSettings:
    defaults = SauceConnectSettings()
    return SauceConnectSettings(
        binary=data.get("binary", defaults.binary),
        connect_retries=data.get("connect_retries", defaults.connect_retries),
        connect_retry_timeout=data.get("connect_retry_timeout", defaults.connect_retry_timeout),
        ready_delay=data.get("ready_delay", defaults.ready_delay),
        close_delay=data.get("close_delay", defaults.close_delay),
    )


def _parse_environment(name: str, data: Dict[str, Any]) -> EnvironmentSettings:
    return EnvironmentSettings(
        name=name,
        selenium_host=data.get("selenium_host", "127.0.0.1"),
        selenium_port=data.get("selenium_port", 4444),
        selenium_path=data.get("selenium_path", "/wd/hub"),
        use_ssl=data.get("use_ssl", False),
        sauce=data.get("sauce", False),
        wait_timeout=data.get("wait_timeout", 10),
        desired_capabilities=dict(data.get("desired_capabilities", {})),
    )


def load_settings(settings_path: Optional[Path] = None) -> E2ESettings:
    """Load and validate e2e settings from a YAML file.

    Args:
        settings_path: Path to e2e.yml. Defaults to KNE_SETTINGS, then the
            bundled settings file.

    Returns:
        E2ESettings instance.

    Raises:
        FileNotFoundError: If the settings file doesn't exist.
        ValueError: If the settings are invalid against the schema.
    """
    if settings_path is None:
        env_settings = os.environ.get(ENV_SETTINGS)
        settings_path = Path(env_settings) if env_settings else DEFAULT_SETTINGS_PATH
    settings_path = Path(settings_path).resolve()

    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    raw_data = yaml.safe_load(settings_path.read_text(encoding="utf-8")) or {}

    valid, errors = validate_against_schema(raw_data, "e2e-settings.schema.json")
    if not valid:
        raise ValueError(
            f"Invalid settings in {settings_path}:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )

    environments = {
        name: _parse_environment(name, env_data or {})
        for name, env_data in raw_data.get("environments", {}).items()
    }

    return E2ESettings(
        path=settings_path,
        raw_data=raw_data,
        selenium=_parse_selenium(raw_data.get("selenium", {})),
        sauce_connect=_parse_sauce_connect(raw_data.get("sauce_connect", {})),
        environments=environments,
    )


@dataclass
class InvocationConfig:
    """Values supplied for one run, before they are merged into the env."""
    env: str = "default"
    browser_name: Optional[str] = None
    browser_version: Optional[str] = None
    test_paths: List[str] = field(default_factory=list)
    page_object_paths: List[str] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    sauce_username: Optional[str] = None
    sauce_access_key: Optional[str] = None
    selenium_in_background: bool = False
    app_host: str = DEFAULT_APP_HOST
    app_port: int = DEFAULT_APP_PORT
    settings_path: Optional[Path] = None
    timeline_path: Optional[Path] = None
    pytest_args: List[str] = field(default_factory=list)

    @property
    def has_sauce_credentials(self) -> bool:
        return bool(self.sauce_username and self.sauce_access_key)


def split_paths(value: Optional[str]) -> List[str]:
    """Split a comma separated path list, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def join_paths(paths: List[str]) -> str:
    return ",".join(paths)


def _merge_paths(existing: Optional[str], *extra: List[str]) -> List[str]:
    merged = split_paths(existing)
    for paths in extra:
        for path in paths:
            if path not in merged:
                merged.append(path)
    return merged


def build_environment(
    invocation: InvocationConfig,
    base_env: Optional[Mapping[str, str]] = None,
    selenium_server_path: Optional[str] = None,
) -> Dict[str, str]:
    """Merge invocation values into a copy of the process environment.

    Path lists are merged (environment first, then CLI); scalar values from
    the invocation override the environment.

    Raises:
        ConfigurationError: If no test paths are available, or Sauce
            credentials are missing for the saucelabs-local environment.
    """
    env: Dict[str, str] = dict(os.environ if base_env is None else base_env)

    env[ENV_TEST_ENV] = invocation.env

    if invocation.browser_name:
        env[ENV_BROWSER_NAME] = invocation.browser_name
    if invocation.browser_version:
        env[ENV_BROWSER_VERSION] = invocation.browser_version

    test_paths = _merge_paths(env.get(ENV_TEST_PATHS), invocation.test_paths)
    if not test_paths:
        raise ConfigurationError(
            "No test paths provided. Either set the --test_paths config option "
            f"or the {ENV_TEST_PATHS} environment variable"
        )
    env[ENV_TEST_PATHS] = join_paths(test_paths)

    env[ENV_PAGE_OBJECT_PATHS] = join_paths(_merge_paths(
        env.get(ENV_PAGE_OBJECT_PATHS),
        [str(PAGE_OBJECTS_PATH)],
        invocation.page_object_paths,
    ))

    env[ENV_EXCLUDE_TEST_PATHS] = join_paths(
        _merge_paths(env.get(ENV_EXCLUDE_TEST_PATHS), invocation.exclude_paths)
    )

    if not env.get(ENV_SELENIUM_SERVER) and selenium_server_path:
        env[ENV_SELENIUM_SERVER] = selenium_server_path

    env[ENV_APP_HOST] = str(invocation.app_host)
    env[ENV_APP_PORT] = str(invocation.app_port)

    if invocation.settings_path:
        env[ENV_SETTINGS] = str(invocation.settings_path)

    if invocation.env == SAUCE_LOCAL_ENV:
        if not invocation.has_sauce_credentials:
            raise ConfigurationError(
                "You must specify --sauce-username and --sauce-access-key "
                f"when using: --env {invocation.env}"
            )
        env[ENV_SAUCE_USERNAME] = invocation.sauce_username
        env[ENV_SAUCE_ACCESS_KEY] = invocation.sauce_access_key

    return env


def app_address(keystone: Any) -> Tuple[str, int]:
    """Read host and port from a Keystone app handle.

    The handle only needs a get(key) method, so a plain dict works too.
    """
    if keystone is None:
        raise ConfigurationError("A keystone app handle is required")
    host = keystone.get("host") or DEFAULT_APP_HOST
    port = keystone.get("port") or DEFAULT_APP_PORT
    return str(host), int(port)


def admin_ui_url(host: str, port: int) -> str:
    return f"http://{host}:{port}/keystone/"
