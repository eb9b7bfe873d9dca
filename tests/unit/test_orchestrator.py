"""Unit tests for orchestrator.py.

The Selenium server, Sauce Connect client and test runner are mostly
replaced by small recording doubles so each stage and the cleanup path can
be checked without spawning anything. A real SeleniumServer around a silent
script covers a server killed during startup.
"""

from __future__ import annotations

import signal
from pathlib import Path
from typing import List, Optional
from unittest.mock import MagicMock

import pytest

from keystone_e2e.config import InvocationConfig, load_settings
from keystone_e2e.errors import (
    AutomationServerError,
    ConfigurationError,
    E2EError,
    TestRunFailure,
    TunnelError,
)
from keystone_e2e.exec import ExecResult
from keystone_e2e.orchestrator import E2ERun, RunState, StartOptions, pytest_log_path, start_e2e
from keystone_e2e.selenium_server import SeleniumServer
from keystone_e2e.timeline import EventType, TimelineLogger


SILENT_SCRIPT = """\
import time
time.sleep(60)
"""


class FakeRunner:
    """Test runner double recording the environment it was given."""

    def __init__(self, passed: bool = True, exit_code: int = 0, raises: Optional[Exception] = None):
        self.passed = passed
        self.exit_code = exit_code
        self.raises = raises
        self.environs: List[dict] = []
        self.last_result: Optional[ExecResult] = None

    def run(self, environ):
        self.environs.append(dict(environ))
        if self.raises:
            raise self.raises
        self.last_result = ExecResult(
            command="pytest", exit_code=self.exit_code, stdout="", stderr="", duration_ms=1,
        )
        return self.passed


class FakeServer:
    """Selenium server double."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.started = 0
        self.stopped = 0

    def start(self):
        self.started += 1
        if self.fail:
            raise AutomationServerError("Selenium exited with error code 1", exit_code=1)

    def stop(self):
        self.stopped += 1
        return True


@pytest.fixture
def settings(settings_file: Path):
    return load_settings(settings_file)


def make_run(invocation, settings, base_env, runner=None, server=None, tunnel_client=None, **kwargs):
    server = server or FakeServer()
    run = E2ERun(
        invocation,
        settings=settings,
        server_factory=lambda: server,
        tunnel_client=tunnel_client or MagicMock(),
        runner=runner or FakeRunner(),
        base_env=base_env,
        sleep=lambda s: None,
        **kwargs,
    )
    return run, server


class TestE2ERun:
    """Test the run stages and cleanup guarantees."""

    def test_successful_default_run(self, invocation, settings, base_env):
        runner = FakeRunner()
        run, server = make_run(invocation, settings, base_env, runner=runner)

        assert run.execute() is None
        assert server.started == 0
        assert runner.environs[0]["KNE_SELENIUM_START_PROCESS"] == "true"
        assert runner.environs[0]["KNE_TEST_PATHS"] == "tests/e2e/adminUI"
        assert run.context.history == [
            RunState.IDLE, RunState.SERVER_STARTING, RunState.TUNNEL_STARTING,
            RunState.TESTS_RUNNING, RunState.CLEANING_UP, RunState.DONE,
        ]

    def test_background_selenium_started_and_stopped_once(self, settings, base_env):
        invocation = InvocationConfig(test_paths=["t"], selenium_in_background=True)
        runner = FakeRunner()
        run, server = make_run(invocation, settings, base_env, runner=runner)

        assert run.execute() is None
        assert server.started == 1
        assert server.stopped == 1
        assert runner.environs[0]["KNE_SELENIUM_START_PROCESS"] == "false"

    def test_background_ignored_for_other_envs(self, settings, base_env):
        invocation = InvocationConfig(env="chrome", test_paths=["t"], selenium_in_background=True)
        runner = FakeRunner()
        run, server = make_run(invocation, settings, base_env, runner=runner)

        run.execute()
        assert server.started == 0
        assert runner.environs[0]["KNE_SELENIUM_START_PROCESS"] == "false"

    def test_server_failure_skips_tests(self, settings, base_env):
        invocation = InvocationConfig(test_paths=["t"], selenium_in_background=True)
        runner = FakeRunner()
        run, server = make_run(invocation, settings, base_env, runner=runner, server=FakeServer(fail=True))

        error = run.execute()
        assert isinstance(error, AutomationServerError)
        assert error.exit_code == 1
        assert runner.environs == []
        assert server.stopped == 1

    def test_test_failure(self, invocation, settings, base_env):
        run, _ = make_run(invocation, settings, base_env, runner=FakeRunner(passed=False, exit_code=1))
        error = run.execute()
        assert isinstance(error, TestRunFailure)
        assert error.exit_code == 1

    def test_runner_exception_becomes_error(self, invocation, settings, base_env):
        run, _ = make_run(invocation, settings, base_env, runner=FakeRunner(raises=OSError("boom")))
        error = run.execute()
        assert isinstance(error, E2EError)
        assert str(error) == "failed to run the test runner!"

    def test_configuration_error_spawns_nothing(self, settings, base_env):
        runner = FakeRunner()
        callback = MagicMock()
        run, server = make_run(InvocationConfig(), settings, base_env, runner=runner, callback=callback)

        error = run.execute()
        assert isinstance(error, ConfigurationError)
        assert runner.environs == []
        assert server.started == 0
        callback.assert_called_once_with(error)
        assert RunState.CLEANING_UP not in run.context.history

    def test_callback_called_once_on_success(self, invocation, settings, base_env):
        callback = MagicMock()
        run, _ = make_run(invocation, settings, base_env, callback=callback)
        run.execute()
        callback.assert_called_once_with(None)

    def test_timeline(self, invocation, settings, base_env, tmp_path: Path):
        timeline = TimelineLogger(tmp_path / "t.jsonl")
        run, _ = make_run(invocation, settings, base_env, timeline=timeline)
        run.execute()
        events = [e["event"] for e in timeline.read_events()]
        assert events[0] == EventType.RUN_START.value
        assert events[-2:] == [EventType.CLEANUP.value, EventType.RUN_END.value]
        assert timeline.get_events_by_type(EventType.RUN_END)[0]["status"] == "pass"

    def test_killed_server_error_reaches_callback(self, settings, base_env, script_factory, kill_when_spawned):
        invocation = InvocationConfig(test_paths=["t"], selenium_in_background=True)
        server = SeleniumServer(command=script_factory("silent.py", SILENT_SCRIPT), ready_timeout=20)
        runner = FakeRunner()
        callback = MagicMock()
        run, _ = make_run(invocation, settings, base_env, runner=runner, server=server, callback=callback)
        kill_when_spawned(server)

        error = run.execute()
        assert isinstance(error, AutomationServerError)
        assert error.exit_code == -signal.SIGKILL
        assert str(error) == f"Selenium exited with error code {error.exit_code}"
        callback.assert_called_once_with(error)
        assert runner.environs == []
        assert run.context.state is RunState.DONE

    def test_keyboard_interrupt_propagates_after_cleanup(self, settings, base_env):
        invocation = InvocationConfig(test_paths=["t"], selenium_in_background=True)
        callback = MagicMock()
        run, server = make_run(
            invocation, settings, base_env, runner=FakeRunner(raises=KeyboardInterrupt()), callback=callback,
        )

        with pytest.raises(KeyboardInterrupt):
            run.execute()
        assert server.stopped == 1
        assert run.context.state is RunState.CLEANING_UP
        callback.assert_not_called()

    def test_pytest_log_next_to_timeline(self, tmp_path: Path, settings):
        invocation = InvocationConfig(test_paths=["t"], timeline_path=tmp_path / "run" / "timeline.jsonl")
        run = E2ERun(invocation, settings=settings, tunnel_client=MagicMock())
        assert run.runner.log_path == tmp_path / "run" / "pytest.log"
        assert pytest_log_path(InvocationConfig()) is None


class TestTunnelStage:
    """Test tunnel handling for Sauce environments."""

    def test_sauce_local_opens_and_closes_tunnel(self, settings, base_env):
        invocation = InvocationConfig(
            env="saucelabs-local", test_paths=["t"], sauce_username="alice", sauce_access_key="k3y",
        )
        client = MagicMock()
        handle = client.open.return_value
        run, _ = make_run(invocation, settings, base_env, tunnel_client=client)

        assert run.execute() is None
        options = client.open.call_args[0][0]
        assert options.username == "alice"
        assert options.connect_retries == 2
        handle.close.assert_called_once()
        assert run.context.tunnel.active is False

    def test_travis_uses_job_number(self, settings, base_env):
        base_env.update({
            "SAUCE_USERNAME": "ci", "SAUCE_ACCESS_KEY": "secret", "TRAVIS_JOB_NUMBER": "77.2",
        })
        client = MagicMock()
        run, _ = make_run(InvocationConfig(env="saucelabs-travis", test_paths=["t"]), settings, base_env,
                          tunnel_client=client)

        assert run.execute() is None
        assert client.open.call_args[0][0].tunnel_identifier == "77.2"

    def test_tunnel_failure_skips_tests(self, settings, base_env):
        base_env.update({"SAUCE_USERNAME": "ci", "SAUCE_ACCESS_KEY": "secret"})
        client = MagicMock()
        client.open.side_effect = TunnelError("Sauce Connect failed after 3 attempts: x")
        runner = FakeRunner()
        run, _ = make_run(InvocationConfig(env="saucelabs-travis", test_paths=["t"]), settings, base_env,
                          runner=runner, tunnel_client=client)

        error = run.execute()
        assert isinstance(error, TunnelError)
        assert runner.environs == []

    def test_tunnel_closed_after_test_failure(self, settings, base_env):
        invocation = InvocationConfig(
            env="saucelabs-local", test_paths=["t"], sauce_username="alice", sauce_access_key="k3y",
        )
        client = MagicMock()
        run, _ = make_run(invocation, settings, base_env, runner=FakeRunner(passed=False, exit_code=1),
                          tunnel_client=client)

        assert isinstance(run.execute(), TestRunFailure)
        client.open.return_value.close.assert_called_once()

    def test_default_env_never_opens_tunnel(self, settings, base_env):
        base_env.update({"SAUCE_USERNAME": "ci", "SAUCE_ACCESS_KEY": "secret"})
        client = MagicMock()
        run, _ = make_run(InvocationConfig(test_paths=["t"]), settings, base_env, tunnel_client=client)
        run.execute()
        client.open.assert_not_called()

    def test_unexpected_tunnel_exception_reaches_callback(self, settings, base_env):
        base_env.update({"SAUCE_USERNAME": "ci", "SAUCE_ACCESS_KEY": "secret"})
        client = MagicMock()
        client.open.side_effect = PermissionError("ready file is locked")
        runner = FakeRunner()
        callback = MagicMock()
        run, _ = make_run(InvocationConfig(env="saucelabs-travis", test_paths=["t"]), settings, base_env,
                          runner=runner, tunnel_client=client, callback=callback)

        error = run.execute()
        assert type(error) is E2EError
        assert str(error) == "ready file is locked"
        assert isinstance(error.__cause__, PermissionError)
        callback.assert_called_once_with(error)
        assert runner.environs == []
        assert run.context.history[-2:] == [RunState.CLEANING_UP, RunState.DONE]
        assert run.context.tunnel.active is False


class TestStartE2E:
    """Test the library entry point."""

    def test_requires_keystone(self):
        with pytest.raises(ConfigurationError):
            start_e2e({})

    def test_uses_app_address_and_run_selenium(self, settings, base_env):
        runner = FakeRunner()
        server = FakeServer()
        error = start_e2e(
            StartOptions(
                keystone={"host": "127.0.0.1", "port": 4000},
                run_selenium=True,
                invocation=InvocationConfig(test_paths=["t"]),
            ),
            settings=settings,
            runner=runner,
            server_factory=lambda: server,
            base_env=base_env,
        )
        assert error is None
        assert server.started == 1
        assert runner.environs[0]["KNE_APP_HOST"] == "127.0.0.1"
        assert runner.environs[0]["KNE_APP_PORT"] == "4000"

    def test_parses_argv(self, settings, base_env):
        runner = FakeRunner()
        callback = MagicMock()
        error = start_e2e(
            {"keystone": {"port": 3001}, "argv": ["--env", "chrome", "--test_paths", "a,b", "--", "-x"]},
            callback=callback,
            settings=settings,
            runner=runner,
            base_env=base_env,
        )
        assert error is None
        callback.assert_called_once_with(None)
        assert runner.environs[0]["KNE_TEST_ENV"] == "chrome"
        assert runner.environs[0]["KNE_TEST_PATHS"] == "a,b"
        assert runner.environs[0]["KNE_APP_PORT"] == "3001"

    def test_does_not_mutate_given_invocation(self, settings, base_env):
        invocation = InvocationConfig(test_paths=["t"])
        start_e2e(
            {"keystone": {"port": 3005}, "invocation": invocation},
            settings=settings, runner=FakeRunner(), base_env=base_env,
        )
        assert invocation.app_port == 3000
