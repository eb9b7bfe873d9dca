"""Test runner invocation.

The suite runs in a pytest child process so a crashing browser session
cannot take the supervisor down with it. The child reads its settings
back from the KNE_* variables.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .config import ENV_EXCLUDE_TEST_PATHS, ENV_TEST_PATHS, split_paths
from .exec import ExecResult, format_command, run_command_with_streaming
from .timeline import TimelineLogger


PLUGIN_MODULE = "keystone_e2e.pytest_plugin"


def build_pytest_args(environ: Mapping[str, str], extra_args: Optional[Sequence[str]] = None) -> List[str]:
    """Assemble pytest arguments from the run environment.

    Args:
        environ: Environment produced by build_environment().
        extra_args: Additional pytest arguments, placed before the paths.

    Returns:
        Argument list for `python -m pytest`.
    """
    args = ["-p", PLUGIN_MODULE]
    for pattern in split_paths(environ.get(ENV_EXCLUDE_TEST_PATHS)):
        args += ["--ignore-glob", pattern]
    args += list(extra_args or [])
    args += split_paths(environ.get(ENV_TEST_PATHS))
    return args


class PytestRunner:
    """Runs the test suite as a child process."""

    def __init__(
        self,
        extra_args: Optional[Sequence[str]] = None,
        python: str = sys.executable,
        timeline: Optional[TimelineLogger] = None,
        log_path: Optional[Path] = None,
    ):
        self.extra_args = list(extra_args or [])
        self.python = python
        self.timeline = timeline
        self.log_path = log_path
        self.last_result: Optional[ExecResult] = None

    def command(self, environ: Mapping[str, str]) -> List[str]:
        return [self.python, "-m", "pytest"] + build_pytest_args(environ, self.extra_args)

    def run(self, environ: Mapping[str, str]) -> bool:
        """Run pytest with environ as its complete environment.

        The child output is also written to log_path when one is set.

        Returns:
            True if every collected test passed.
        """
        cmd = self.command(environ)
        if self.timeline:
            self.timeline.tests_start(format_command(cmd))

        result = run_command_with_streaming(cmd, env=environ, replace_env=True, log_path=self.log_path)
        self.last_result = result

        if self.timeline:
            if result.success:
                self.timeline.tests_pass(result.duration_ms)
            else:
                self.timeline.tests_fail(
                    result.error or f"exit code {result.exit_code}", result.duration_ms
                )
        return result.success
