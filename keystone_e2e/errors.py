"""Exception types raised by the e2e harness."""

from __future__ import annotations

from typing import Optional


class E2EError(Exception):
    """Base class for every error reported through the run callback."""


class ConfigurationError(E2EError):
    """Invocation is missing required settings (test paths, credentials)."""


class AutomationServerError(E2EError):
    """Selenium server could not be started."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class TunnelError(E2EError):
    """Sauce Connect tunnel could not be opened."""


class TestRunFailure(E2EError):
    """Test runner completed but reported failing tests."""

    __test__ = False

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class PageObjectError(E2EError):
    """Page object command was called with an invalid specification."""


class FieldSpecError(PageObjectError):
    """Field specification does not resolve to a field test object."""


class ExpectationError(AssertionError):
    """A browser expectation did not hold within the wait timeout."""

    def __init__(self, message: str, selector: Optional[str] = None):
        super().__init__(message)
        self.selector = selector
