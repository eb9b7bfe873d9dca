"""
Shared test fixtures for keystone-e2e tests.

This module provides pytest fixtures for unit tests, including:
- Settings files written to a temporary directory
- A clean KNE_* environment
- Small child-process scripts standing in for Selenium and Sauce Connect
- Common test utilities
"""

import os
import signal
import sys
import textwrap
import threading
import time
from pathlib import Path
from typing import Dict, Generator
from unittest.mock import MagicMock

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from keystone_e2e.config import InvocationConfig  # noqa: E402


KNE_VARIABLES = [
    "KNE_TEST_ENV",
    "KNE_BROWSER_NAME",
    "KNE_BROWSER_VERSION",
    "KNE_TEST_PATHS",
    "KNE_PAGE_OBJECT_PATHS",
    "KNE_EXCLUDE_TEST_PATHS",
    "KNE_SELENIUM_SERVER",
    "KNE_SELENIUM_START_PROCESS",
    "KNE_SETTINGS",
    "KNE_APP_HOST",
    "KNE_APP_PORT",
    "SAUCE_USERNAME",
    "SAUCE_ACCESS_KEY",
    "TRAVIS_JOB_NUMBER",
]


# =============================================================================
# Environment fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clean_kne_env(monkeypatch) -> None:
    """Remove harness variables inherited from the developer's shell."""
    for name in KNE_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def base_env() -> Dict[str, str]:
    """Minimal environment passed explicitly to build_environment."""
    return {"PATH": os.environ.get("PATH", "")}


@pytest.fixture
def invocation() -> InvocationConfig:
    """Invocation for the default environment with one test path."""
    return InvocationConfig(test_paths=["tests/e2e/adminUI"])


# =============================================================================
# Settings fixtures
# =============================================================================

SETTINGS_YAML = """\
version: "1"
selenium:
  server_path: /opt/selenium/server.jar
  java: java
  ready_line: "Selenium Server is up and running"
  ready_timeout: 30
sauce_connect:
  binary: sc
  connect_retries: 2
  connect_retry_timeout: 10
  ready_delay: 0
  close_delay: 0
environments:
  default:
    selenium_host: 127.0.0.1
    selenium_port: 4444
    wait_timeout: 5
    desired_capabilities:
      browserName: firefox
  saucelabs-local:
    selenium_host: ondemand.saucelabs.com
    selenium_port: 443
    use_ssl: true
    sauce: true
    desired_capabilities:
      browserName: chrome
      browserVersion: "latest"
      platformName: Windows 10
"""


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Write a small valid e2e.yml and return its path."""
    path = tmp_path / "e2e.yml"
    path.write_text(SETTINGS_YAML)
    return path


# =============================================================================
# Child process scripts
# =============================================================================

def write_script(tmp_path: Path, name: str, body: str) -> Path:
    """Write a python script to tmp_path and return its path."""
    path = tmp_path / name
    path.write_text(textwrap.dedent(body))
    return path


@pytest.fixture
def script_factory(tmp_path: Path):
    """Return a helper that writes a script and builds its command line."""
    def make(name: str, body: str):
        return [sys.executable, str(write_script(tmp_path, name, body))]
    return make


@pytest.fixture
def kill_when_spawned():
    """Return a helper that SIGKILLs a SeleniumServer's process from another thread.

    The thread waits until the process exists, then kills it while start()
    is still waiting for the readiness line.
    """
    threads = []

    def kill(server, delay: float = 0.3) -> threading.Thread:
        def target():
            deadline = time.time() + 10
            while server.pid is None and time.time() < deadline:
                time.sleep(0.01)
            time.sleep(delay)
            if server.pid is not None:
                os.kill(server.pid, signal.SIGKILL)

        thread = threading.Thread(target=target, daemon=True)
        thread.start()
        threads.append(thread)
        return thread

    yield kill
    for thread in threads:
        thread.join(timeout=10)


# =============================================================================
# Browser fixtures
# =============================================================================

@pytest.fixture
def browser() -> MagicMock:
    """Browser double recording the calls page and field objects make."""
    mock = MagicMock(name="browser", unsafe=True)
    mock.get_value.return_value = ""
    return mock


@pytest.fixture
def isolated_cwd(tmp_path: Path) -> Generator[Path, None, None]:
    """Change to a temporary directory for the test, restore afterward."""
    original_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)
