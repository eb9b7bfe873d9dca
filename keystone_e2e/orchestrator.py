"""Run orchestration.

One run goes through the stages:

    IDLE -> SERVER_STARTING -> TUNNEL_STARTING -> TESTS_RUNNING
         -> CLEANING_UP -> DONE

Configuration errors are reported before anything is spawned. Once a
process may exist, cleanup always runs: the Selenium server gets exactly one
stop attempt and an open tunnel is closed before the completion callback
fires with the first error (or None). Exceptions other than E2EError raised
by a stage are wrapped in an E2EError so they reach the callback too.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .config import (
    ENV_SAUCE_ACCESS_KEY,
    ENV_SAUCE_USERNAME,
    ENV_SELENIUM_SERVER,
    ENV_SELENIUM_START_PROCESS,
    ENV_TEST_PATHS,
    ENV_TUNNEL_ID,
    E2ESettings,
    InvocationConfig,
    app_address,
    build_environment,
    load_settings,
    split_paths,
)
from .errors import ConfigurationError, E2EError, TestRunFailure
from .runner import PytestRunner
from .selenium_server import SeleniumServer
from .timeline import TimelineLogger, create_timeline_logger
from .tunnel import SauceConnectClient, TunnelOptions, TunnelSupervisor, tunnel_required


logger = logging.getLogger(__name__)

Callback = Callable[[Optional[E2EError]], Any]

PYTEST_LOG_NAME = "pytest.log"


class RunState(str, Enum):
    """Stages of a run."""
    IDLE = "idle"
    SERVER_STARTING = "server_starting"
    TUNNEL_STARTING = "tunnel_starting"
    TESTS_RUNNING = "tests_running"
    CLEANING_UP = "cleaning_up"
    DONE = "done"


@dataclass
class RunContext:
    """Mutable state of one run."""
    invocation: InvocationConfig
    environ: Dict[str, str] = field(default_factory=dict)
    server: Optional[SeleniumServer] = None
    tunnel: Optional[TunnelSupervisor] = None
    error: Optional[E2EError] = None
    state: RunState = RunState.IDLE
    history: List[RunState] = field(default_factory=lambda: [RunState.IDLE])

    def transition(self, state: RunState) -> None:
        logger.debug("run state: %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def record_error(self, error: E2EError) -> None:
        """Keep the first error; later ones are only logged."""
        if self.error is None:
            self.error = error
        else:
            logger.debug("ignoring later error: %s", error)


def pytest_log_path(invocation: InvocationConfig) -> Optional[Path]:
    """Log file for the test runner output, next to the run timeline."""
    if invocation.timeline_path is None:
        return None
    return invocation.timeline_path.parent / PYTEST_LOG_NAME


class E2ERun:
    """Executes one end-to-end run with guaranteed cleanup."""

    def __init__(
        self,
        invocation: InvocationConfig,
        settings: Optional[E2ESettings] = None,
        server_factory: Optional[Callable[[], SeleniumServer]] = None,
        tunnel_client: Optional[SauceConnectClient] = None,
        runner: Optional[PytestRunner] = None,
        timeline: Optional[TimelineLogger] = None,
        base_env: Optional[Mapping[str, str]] = None,
        callback: Optional[Callback] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize a run.

        Args:
            invocation: Values for this run.
            settings: Loaded settings. Defaults to load_settings().
            server_factory: Builds the Selenium supervisor for background runs.
            tunnel_client: Sauce Connect client.
            runner: Test runner. Defaults to a PytestRunner.
            timeline: Timeline logger for events.
            base_env: Environment to merge into. Defaults to os.environ.
            callback: Called once with the first error or None.
            sleep: Used for the tunnel settle delays.
        """
        self.invocation = invocation
        self.settings = settings or load_settings(invocation.settings_path)
        self.timeline = timeline
        self.server_factory = server_factory or self._default_server
        self.tunnel_client = tunnel_client or SauceConnectClient(self.settings.sauce_connect.binary)
        self.runner = runner or PytestRunner(
            invocation.pytest_args, timeline=timeline, log_path=pytest_log_path(invocation),
        )
        self.base_env = base_env
        self.callback = callback
        self._sleep = sleep
        self.context = RunContext(invocation=invocation)

    def _default_server(self) -> SeleniumServer:
        selenium = self.settings.selenium
        return SeleniumServer(
            jar_path=self.context.environ.get(ENV_SELENIUM_SERVER) or selenium.server_path,
            java=selenium.java,
            ready_line=selenium.ready_line,
            ready_timeout=selenium.ready_timeout,
            timeline=self.timeline,
        )

    def execute(self) -> Optional[E2EError]:
        """Run every stage and return the first error, or None on success."""
        ctx = self.context
        start_time = time.time()

        try:
            ctx.environ = build_environment(
                self.invocation,
                self.base_env,
                selenium_server_path=self.settings.selenium.server_path,
            )
        except ConfigurationError as e:
            logger.error("%s", e)
            ctx.record_error(e)
            return self._finish(start_time)

        if self.timeline:
            self.timeline.run_start(self.invocation.env, split_paths(ctx.environ.get(ENV_TEST_PATHS)))

        try:
            self._run_stages()
        except E2EError as e:
            ctx.record_error(e)
        finally:
            self._cleanup()

        return self._finish(start_time)

    def _run_stages(self) -> None:
        try:
            self._start_server()
            self._start_tunnel()
            self._run_tests()
        except E2EError:
            raise
        except Exception as e:
            logger.exception("unexpected error while %s", self.context.state.value)
            raise E2EError(str(e) or type(e).__name__) from e

    def _start_server(self) -> None:
        ctx = self.context
        ctx.transition(RunState.SERVER_STARTING)
        env = self.invocation.env

        if env == "default" and self.invocation.selenium_in_background:
            ctx.environ[ENV_SELENIUM_START_PROCESS] = "false"
            ctx.server = self.server_factory()
            ctx.server.start()
        elif env == "default":
            ctx.environ[ENV_SELENIUM_START_PROCESS] = "true"
        else:
            ctx.environ[ENV_SELENIUM_START_PROCESS] = "false"

    def _tunnel_options(self) -> TunnelOptions:
        sauce = self.settings.sauce_connect
        environ = self.context.environ
        return TunnelOptions(
            username=environ.get(ENV_SAUCE_USERNAME),
            access_key=environ.get(ENV_SAUCE_ACCESS_KEY),
            connect_retries=sauce.connect_retries,
            connect_retry_timeout=sauce.connect_retry_timeout,
            tunnel_identifier=environ.get(ENV_TUNNEL_ID),
        )

    def _start_tunnel(self) -> None:
        ctx = self.context
        ctx.transition(RunState.TUNNEL_STARTING)

        options = self._tunnel_options()
        if not tunnel_required(self.invocation.env, options.has_credentials):
            return

        sauce = self.settings.sauce_connect
        ctx.tunnel = TunnelSupervisor(
            self.tunnel_client,
            options,
            ready_delay=sauce.ready_delay,
            close_delay=sauce.close_delay,
            timeline=self.timeline,
            sleep=self._sleep,
        )
        ctx.tunnel.start()

    def _run_tests(self) -> None:
        ctx = self.context
        ctx.transition(RunState.TESTS_RUNNING)
        logger.info("Running tests...")

        try:
            passed = self.runner.run(ctx.environ)
        except Exception as e:
            logger.exception("failed to run the test runner!")
            raise E2EError("failed to run the test runner!") from e

        if not passed:
            last_result = getattr(self.runner, "last_result", None)
            exit_code = last_result.exit_code if last_result is not None else None
            logger.error("test runner returned an error status code")
            raise TestRunFailure("tests failed", exit_code=exit_code)

    def _cleanup(self) -> None:
        ctx = self.context
        ctx.transition(RunState.CLEANING_UP)

        server_stopped = False
        if ctx.server is not None:
            try:
                server_stopped = ctx.server.stop()
            except Exception:
                logger.exception("Error stopping Selenium Server")

        tunnel_stopped = False
        if ctx.tunnel is not None:
            try:
                tunnel_stopped = ctx.tunnel.stop()
            except Exception:
                logger.exception("Error closing Sauce Connect")

        if self.timeline:
            self.timeline.cleanup(server_stopped, tunnel_stopped)

    def _finish(self, start_time: float) -> Optional[E2EError]:
        ctx = self.context
        ctx.transition(RunState.DONE)
        error = ctx.error

        if self.timeline:
            self.timeline.run_end(
                "fail" if error else "pass",
                error=str(error) if error else None,
                duration_ms=int((time.time() - start_time) * 1000),
            )
        if error is None:
            logger.info("All tests passed")

        if self.callback is not None:
            self.callback(error)
        return error


@dataclass
class StartOptions:
    """Options for start_e2e().

    Attributes:
        keystone: The running Keystone app. Anything with get("host") and
            get("port") works, including a dict.
        run_selenium: Start Selenium in the background (default env only).
        invocation: Explicit invocation values.
        argv: CLI style arguments, parsed like the keystone-e2e command.
    """
    keystone: Any = None
    run_selenium: Optional[bool] = None
    invocation: Optional[InvocationConfig] = None
    argv: Optional[Sequence[str]] = None


def _coerce_options(options: Any) -> StartOptions:
    if isinstance(options, StartOptions):
        return options
    if options is None:
        return StartOptions()
    known = {f.name for f in dataclasses.fields(StartOptions)}
    return StartOptions(**{k: v for k, v in dict(options).items() if k in known})


def start_e2e(options: Any, callback: Optional[Callback] = None, **run_kwargs: Any) -> Optional[E2EError]:
    """Run the end-to-end suite against a running Keystone app.

    Args:
        options: StartOptions or a mapping with the same keys.
        callback: Called once with the first error or None.
        **run_kwargs: Passed through to E2ERun (settings, runner, ...).

    Returns:
        The first error, or None when every stage succeeded.

    Raises:
        ConfigurationError: If no keystone handle was supplied.
    """
    opts = _coerce_options(options)
    if opts.keystone is None:
        raise ConfigurationError("start_e2e requires a keystone app handle")

    if opts.invocation is not None:
        invocation = dataclasses.replace(opts.invocation)
    elif opts.argv is not None:
        from .cli import invocation_from_args, parse_args

        args = parse_args(list(opts.argv))
        invocation = invocation_from_args(args, args.pytest_args)
    else:
        invocation = InvocationConfig()

    invocation.app_host, invocation.app_port = app_address(opts.keystone)
    if opts.run_selenium is not None:
        invocation.selenium_in_background = bool(opts.run_selenium)

    timeline = run_kwargs.pop("timeline", None) or create_timeline_logger(invocation.timeline_path)
    run = E2ERun(invocation, timeline=timeline, callback=callback, **run_kwargs)
    return run.execute()
