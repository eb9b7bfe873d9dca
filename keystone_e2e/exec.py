"""Subprocess execution helpers.

Provides subprocess execution with:
- Optional timeouts
- stdout/stderr capture
- Streaming to the console for long-running children
- Log file output
"""

from __future__ import annotations

import codecs
import os
import selectors
import shlex
import shutil
import signal
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .timeline import utc_now_iso


# Maximum output to store in result (characters)
MAX_STORED_OUTPUT = 100000

# Bytes read from a pipe per select() wakeup
READ_CHUNK_SIZE = 8192


@dataclass
class ExecResult:
    """Result of a subprocess execution."""
    command: str
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False
    error: Optional[str] = None
    log_path: Optional[Path] = None

    @property
    def success(self) -> bool:
        """Check if command succeeded (exit code 0)."""
        return self.exit_code == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        parts = []
        if self.stdout:
            parts.append(self.stdout)
        if self.stderr:
            parts.append(self.stderr)
        return "\n".join(parts)


def _truncate_output(output: str, max_chars: int = MAX_STORED_OUTPUT) -> str:
    """Truncate output to maximum size, keeping head and tail."""
    if len(output) <= max_chars:
        return output

    head_size = max_chars // 2
    tail_size = max_chars - head_size - 100

    return (
        output[:head_size] +
        f"\n\n... [output truncated: {len(output)} total characters, "
        f"showing first {head_size} and last {tail_size}] ...\n\n" +
        output[-tail_size:]
    )


def format_command(command: Union[str, List[str]]) -> str:
    """Render a command for logs."""
    if isinstance(command, str):
        return command
    return " ".join(shlex.quote(str(arg)) for arg in command)


def _prepare_env(env: Optional[Mapping[str, str]], replace_env: bool) -> Dict[str, str]:
    if replace_env:
        return dict(env or {})
    run_env = os.environ.copy()
    if env:
        run_env.update(env)
    return run_env


def run_command(
    command: Union[str, List[str]],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
    env: Optional[Mapping[str, str]] = None,
    replace_env: bool = False,
) -> ExecResult:
    """Run a command to completion and capture its output.

    Args:
        command: Command to run (string or list of args).
        cwd: Working directory.
        timeout: Timeout in seconds, None for no limit.
        env: Environment variables (merged with current env unless replace_env).
        replace_env: Use env as the complete child environment.

    Returns:
        ExecResult with command results.
    """
    cmd_str = format_command(command)
    if isinstance(command, str):
        command = shlex.split(command)

    start_time = time.time()
    stdout_data = ""
    stderr_data = ""
    timed_out = False
    error_msg = None

    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            env=_prepare_env(env, replace_env),
            capture_output=True,
            text=True,
            stdin=subprocess.DEVNULL,
            timeout=timeout,
        )
        exit_code = result.returncode
        stdout_data = result.stdout or ""
        stderr_data = result.stderr or ""

    except subprocess.TimeoutExpired as e:
        timed_out = True
        error_msg = f"Command timed out after {timeout}s"
        exit_code = -1
        if e.stdout:
            stdout_data = e.stdout if isinstance(e.stdout, str) else e.stdout.decode("utf-8", errors="replace")
        if e.stderr:
            stderr_data = e.stderr if isinstance(e.stderr, str) else e.stderr.decode("utf-8", errors="replace")

    except FileNotFoundError as e:
        error_msg = f"Command not found: {e}"
        exit_code = 127

    except PermissionError as e:
        error_msg = f"Permission denied: {e}"
        exit_code = 126

    return ExecResult(
        command=cmd_str,
        exit_code=exit_code,
        stdout=_truncate_output(stdout_data),
        stderr=_truncate_output(stderr_data),
        duration_ms=int((time.time() - start_time) * 1000),
        timed_out=timed_out,
        error=error_msg,
    )


def run_command_with_streaming(
    command: Union[str, List[str]],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    replace_env: bool = False,
    log_path: Optional[Path] = None,
) -> ExecResult:
    """Run a command with streaming output to console.

    Output is displayed in real-time while also being captured. The test
    runner is executed this way so its report shows up live in CI logs.
    Both pipes are read in chunks as soon as data arrives, so a child
    printing progress without a newline never stalls the other stream.

    Args:
        command: Command to run.
        cwd: Working directory.
        env: Environment variables.
        replace_env: Use env as the complete child environment.
        log_path: Path to write output to.

    Returns:
        ExecResult with command results.
    """
    cmd_str = format_command(command)
    if isinstance(command, str):
        command = shlex.split(command)

    log_file = None
    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_file = log_path.open("w", encoding="utf-8")
        log_file.write(f"# Command: {cmd_str}\n")
        log_file.write(f"# Started: {utc_now_iso()}\n")
        log_file.write("-" * 60 + "\n")

    start_time = time.time()
    stdout_chunks: List[str] = []
    stderr_chunks: List[str] = []
    error_msg = None
    exit_code = -1

    try:
        process = subprocess.Popen(
            command,
            cwd=str(cwd) if cwd else None,
            env=_prepare_env(env, replace_env),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

        streams = {
            process.stdout.fileno(): (stdout_chunks, sys.stdout),
            process.stderr.fileno(): (stderr_chunks, sys.stderr),
        }
        decoders = {fd: codecs.getincrementaldecoder("utf-8")(errors="replace") for fd in streams}

        sel = selectors.DefaultSelector()
        for fd in streams:
            sel.register(fd, selectors.EVENT_READ)

        while sel.get_map():
            for key, _ in sel.select():
                fd = key.fd
                data = os.read(fd, READ_CHUNK_SIZE)
                text = decoders[fd].decode(data, final=not data)
                if not data:
                    sel.unregister(fd)
                if not text:
                    continue

                chunks, console = streams[fd]
                chunks.append(text)
                console.write(text)
                console.flush()
                if log_file:
                    log_file.write(text)

        sel.close()
        process.stdout.close()
        process.stderr.close()
        exit_code = process.wait()

    except FileNotFoundError as e:
        error_msg = f"Command not found: {e}"
        exit_code = 127

    duration_ms = int((time.time() - start_time) * 1000)

    if log_file:
        log_file.write("-" * 60 + "\n")
        log_file.write(f"# Ended: {utc_now_iso()}\n")
        log_file.write(f"# Duration: {duration_ms}ms\n")
        log_file.write(f"# Exit code: {exit_code}\n")
        log_file.close()

    return ExecResult(
        command=cmd_str,
        exit_code=exit_code,
        stdout=_truncate_output("".join(stdout_chunks)),
        stderr=_truncate_output("".join(stderr_chunks)),
        duration_ms=duration_ms,
        error=error_msg,
        log_path=log_path,
    )


def which(cmd: str) -> Optional[str]:
    """Find executable in PATH."""
    return shutil.which(cmd)


def stop_process(process: subprocess.Popen, timeout: float = 10) -> bool:
    """Stop a process gracefully, then forcefully if needed.

    Processes are started in their own session, so the whole group is
    signalled on Unix.

    Args:
        process: Process to stop.
        timeout: Seconds to wait after the graceful signal.

    Returns:
        True if a signal was sent, False if the process had already exited.
    """
    if process.poll() is not None:
        return False

    try:
        if sys.platform != "win32":
            os.killpg(os.getpgid(process.pid), signal.SIGTERM)
        else:
            process.terminate()

        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            if sys.platform != "win32":
                os.killpg(os.getpgid(process.pid), signal.SIGKILL)
            else:
                process.kill()
            process.wait(timeout=5)
    except (ProcessLookupError, OSError):
        pass  # Process already gone
    return True
