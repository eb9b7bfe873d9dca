"""Selenium standalone server supervision.

Starts the server as a child process, waits for its readiness line on
stderr, and stops it gracefully (then forcefully) during cleanup.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
import time
from typing import IO, List, Optional

from .errors import AutomationServerError
from .exec import format_command, stop_process
from .timeline import TimelineLogger


logger = logging.getLogger(__name__)

DEFAULT_READY_LINE = "Selenium Server is up and running"
DEFAULT_JAR_PATH = "selenium-server-standalone.jar"

# Interval between readiness checks while waiting on the reader thread
POLL_INTERVAL = 0.1


class SeleniumServer:
    """Supervises one Selenium server process.

    The server is considered ready the first time a stderr line contains
    ready_line. Output keeps being drained (at DEBUG) until the process
    exits so the child never blocks on a full pipe.
    """

    def __init__(
        self,
        command: Optional[List[str]] = None,
        jar_path: Optional[str] = None,
        java: str = "java",
        ready_line: str = DEFAULT_READY_LINE,
        ready_timeout: Optional[float] = None,
        stop_timeout: float = 10,
        timeline: Optional[TimelineLogger] = None,
    ):
        """Initialize the supervisor.

        Args:
            command: Full command to run. Defaults to java -jar <jar_path>.
            jar_path: Path to the standalone server jar.
            java: Java executable.
            ready_line: Substring that marks the server as ready.
            ready_timeout: Seconds to wait for readiness, None to wait forever.
            stop_timeout: Seconds to wait for a graceful exit on stop().
            timeline: Timeline logger for events.
        """
        if command is None:
            command = [java, "-jar", jar_path or DEFAULT_JAR_PATH]
        self.command = list(command)
        self.ready_line = ready_line
        self.ready_timeout = ready_timeout
        self.stop_timeout = stop_timeout
        self.timeline = timeline

        self._process: Optional[subprocess.Popen] = None
        self._ready = threading.Event()
        self._stderr_done = threading.Event()
        self._threads: List[threading.Thread] = []
        self._stopped = False

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def start(self) -> None:
        """Spawn the server and block until it reports readiness.

        Raises:
            AutomationServerError: If the server could not be spawned, exited
                before becoming ready, or missed the readiness timeout.
        """
        if self._process is not None:
            raise AutomationServerError("Selenium server already started")

        cmd_str = format_command(self.command)
        logger.info("Starting Selenium Server...")
        logger.debug("Selenium command: %s", cmd_str)
        if self.timeline:
            self.timeline.server_start(cmd_str)

        start_time = time.time()
        try:
            self._process = subprocess.Popen(
                self.command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                start_new_session=sys.platform != "win32",
            )
        except OSError as e:
            error = f"Failed to start Selenium: {e}"
            if self.timeline:
                self.timeline.server_failed(error)
            raise AutomationServerError(error) from e

        self._threads = [
            threading.Thread(
                target=self._read_stderr, args=(self._process.stderr,),
                name="selenium-stderr", daemon=True,
            ),
            threading.Thread(
                target=self._drain, args=(self._process.stdout,),
                name="selenium-stdout", daemon=True,
            ),
        ]
        for thread in self._threads:
            thread.start()

        self._wait_until_ready(start_time)

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info("Selenium Server is ready")
        if self.timeline:
            self.timeline.server_ready(self._process.pid, duration_ms)

    def _wait_until_ready(self, start_time: float) -> None:
        deadline = start_time + self.ready_timeout if self.ready_timeout is not None else None

        while not self._ready.wait(POLL_INTERVAL):
            exit_code = self._process.poll()
            if exit_code is not None and self._stderr_done.is_set():
                if self._ready.is_set():
                    return
                error = f"Selenium exited with error code {exit_code}"
                if self.timeline:
                    self.timeline.server_failed(error, exit_code)
                raise AutomationServerError(error, exit_code=exit_code)

            if deadline is not None and time.time() >= deadline:
                error = f"Selenium did not become ready within {self.ready_timeout}s"
                stop_process(self._process, timeout=self.stop_timeout)
                if self.timeline:
                    self.timeline.server_failed(error)
                raise AutomationServerError(error)

    def _read_stderr(self, stream: IO[str]) -> None:
        try:
            for line in stream:
                if not self._ready.is_set() and self.ready_line in line:
                    self._ready.set()
                logger.debug("selenium: %s", line.rstrip())
        finally:
            self._stderr_done.set()

    def _drain(self, stream: IO[str]) -> None:
        for line in stream:
            logger.debug("selenium: %s", line.rstrip())

    def stop(self) -> bool:
        """Stop the server if it is running.

        Safe to call repeatedly and when start() was never called.

        Returns:
            True if the process was signalled by this call.
        """
        if self._process is None or self._stopped:
            return False
        self._stopped = True

        signalled = stop_process(self._process, timeout=self.stop_timeout)
        for thread in self._threads:
            thread.join(timeout=1)
        if signalled:
            logger.info("Selenium Server stopped")
        if self.timeline:
            self.timeline.server_stopped(signalled)
        return signalled
