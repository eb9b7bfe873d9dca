"""Sauce Connect tunnel supervision.

SauceConnectClient launches the `sc` binary and waits for its ready file.
TunnelSupervisor wraps a client with the settle delays used around the
test run, and tracks whether a tunnel is currently open.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, IO, List, Optional, Union

from .config import SAUCE_LOCAL_ENV, SAUCE_TRAVIS_ENV
from .errors import TunnelError
from .exec import format_command, stop_process
from .timeline import TimelineLogger


logger = logging.getLogger(__name__)

LOG_PREFIX = "Sauce Connect: "


def tunnel_required(env: str, has_credentials: bool) -> bool:
    """Whether a run in env needs a Sauce Connect tunnel."""
    if env == SAUCE_TRAVIS_ENV:
        return True
    return env == SAUCE_LOCAL_ENV and has_credentials


@dataclass
class TunnelOptions:
    """Options for opening a tunnel."""
    username: Optional[str] = None
    access_key: Optional[str] = None
    connect_retries: int = 5
    connect_retry_timeout: float = 60
    tunnel_identifier: Optional[str] = None
    ready_file_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.access_key)


class SauceConnectHandle:
    """An open tunnel backed by a running `sc` process."""

    def __init__(self, process: subprocess.Popen, ready_file: Path, stop_timeout: float = 30):
        self.process = process
        self.ready_file = ready_file
        self.stop_timeout = stop_timeout
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed and self.process.poll() is None

    def close(self) -> None:
        """Terminate the tunnel process. Repeated calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        stop_process(self.process, timeout=self.stop_timeout)
        try:
            self.ready_file.unlink()
        except FileNotFoundError:
            pass


class SauceConnectClient:
    """Launches Sauce Connect and waits for it to report readiness."""

    def __init__(
        self,
        binary: Union[str, List[str]] = "sc",
        ready_dir: Optional[Path] = None,
        poll_interval: float = 0.5,
    ):
        """Initialize the client.

        Args:
            binary: The sc executable, or a command prefix list.
            ready_dir: Directory for ready files. Defaults to the temp dir.
            poll_interval: Seconds between ready file checks.
        """
        self.binary = [binary] if isinstance(binary, str) else list(binary)
        self.ready_dir = Path(ready_dir) if ready_dir else Path(tempfile.gettempdir())
        self.poll_interval = poll_interval

    def build_command(self, options: TunnelOptions, ready_file: Path) -> List[str]:
        cmd = self.binary + [
            "--user", options.username or "",
            "--api-key", options.access_key or "",
            "--readyfile", str(ready_file),
        ]
        if options.tunnel_identifier:
            cmd += ["--tunnel-identifier", options.tunnel_identifier]
        return cmd

    def open(self, options: TunnelOptions) -> SauceConnectHandle:
        """Open a tunnel, retrying failed attempts.

        Raises:
            TunnelError: If every attempt failed.
        """
        ready_file = self.ready_dir / f"sc-ready-{options.ready_file_id}"
        attempts = max(options.connect_retries, 0) + 1
        last_error = ""

        for attempt in range(1, attempts + 1):
            if ready_file.exists():
                ready_file.unlink()
            try:
                return self._attempt(options, ready_file)
            except TunnelError as e:
                last_error = str(e)
                logger.warning("%sattempt %d/%d failed: %s", LOG_PREFIX, attempt, attempts, e)

        raise TunnelError(f"Sauce Connect failed after {attempts} attempts: {last_error}")

    def _attempt(self, options: TunnelOptions, ready_file: Path) -> SauceConnectHandle:
        cmd = self.build_command(options, ready_file)
        logger.debug("%s%s", LOG_PREFIX, format_command(self.binary))
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                start_new_session=sys.platform != "win32",
            )
        except OSError as e:
            raise TunnelError(f"could not launch {self.binary[0]}: {e}") from e

        threading.Thread(
            target=self._log_output, args=(process.stdout,),
            name="sauce-connect-output", daemon=True,
        ).start()

        deadline = time.time() + options.connect_retry_timeout
        while time.time() < deadline:
            if ready_file.exists():
                return SauceConnectHandle(process, ready_file)
            exit_code = process.poll()
            if exit_code is not None:
                raise TunnelError(f"sc exited with code {exit_code}")
            time.sleep(self.poll_interval)

        stop_process(process)
        raise TunnelError(f"not ready within {options.connect_retry_timeout}s")

    def _log_output(self, stream: IO[str]) -> None:
        for line in stream:
            logger.info("%s%s", LOG_PREFIX, line.rstrip())


class TunnelSupervisor:
    """Starts and stops one tunnel around a test run."""

    def __init__(
        self,
        client: SauceConnectClient,
        options: TunnelOptions,
        ready_delay: float = 5,
        close_delay: float = 60,
        timeline: Optional[TimelineLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.options = options
        self.ready_delay = ready_delay
        self.close_delay = close_delay
        self.timeline = timeline
        self._sleep = sleep
        self.handle: Optional[SauceConnectHandle] = None
        self.active = False

    def start(self) -> None:
        """Open the tunnel and wait for it to settle.

        Raises:
            TunnelError: If the tunnel could not be opened.
        """
        logger.info("Starting Sauce Connect...")
        if self.timeline:
            self.timeline.tunnel_start(self.options.tunnel_identifier)

        start_time = time.time()
        try:
            handle = self.client.open(self.options)
        except TunnelError as e:
            logger.error("%s%s", LOG_PREFIX, e)
            if self.timeline:
                self.timeline.tunnel_failed(str(e))
            raise

        self.handle = handle
        self.active = True
        logger.info("%sready", LOG_PREFIX)
        if self.timeline:
            self.timeline.tunnel_ready(int((time.time() - start_time) * 1000))
        self._sleep(self.ready_delay)

    def stop(self) -> bool:
        """Close the tunnel if one is open.

        Returns:
            True if a tunnel was closed.
        """
        if not self.options.has_credentials or self.handle is None:
            return False

        logger.info("Closing Sauce Connect...")
        handle, self.handle = self.handle, None
        try:
            handle.close()
        finally:
            self.active = False
        if self.timeline:
            self.timeline.tunnel_stopped()
        self._sleep(self.close_delay)
        logger.info("%sclosed", LOG_PREFIX)
        return True
