"""Unit tests for exec.py: subprocess helpers."""

from __future__ import annotations

import subprocess
import sys
import time
from pathlib import Path

from keystone_e2e.exec import (
    ExecResult,
    _truncate_output,
    format_command,
    run_command,
    run_command_with_streaming,
    stop_process,
    which,
)


class TestExecResult:

    def test_success(self):
        result = ExecResult(command="x", exit_code=0, stdout="out", stderr="", duration_ms=1)
        assert result.success
        assert result.output == "out"

    def test_timed_out_is_not_success(self):
        result = ExecResult(command="x", exit_code=0, stdout="", stderr="", duration_ms=1, timed_out=True)
        assert not result.success

    def test_output_combines_streams(self):
        result = ExecResult(command="x", exit_code=1, stdout="a", stderr="b", duration_ms=1)
        assert result.output == "a\nb"


class TestFormatting:

    def test_format_command_quotes_args(self):
        assert format_command(["pytest", "-k", "a b"]) == "pytest -k 'a b'"

    def test_format_command_string(self):
        assert format_command("pytest -q") == "pytest -q"

    def test_truncate_keeps_short_output(self):
        assert _truncate_output("abc", max_chars=10) == "abc"

    def test_truncate_long_output(self):
        text = "x" * 500
        truncated = _truncate_output(text, max_chars=200)
        assert "output truncated: 500 total characters" in truncated


class TestRunCommand:

    def test_captures_output(self):
        result = run_command([sys.executable, "-c", "print('hello')"])
        assert result.success
        assert result.stdout.strip() == "hello"

    def test_exit_code(self):
        result = run_command([sys.executable, "-c", "import sys; sys.exit(4)"])
        assert result.exit_code == 4
        assert not result.success

    def test_missing_command(self):
        result = run_command(["definitely-not-a-real-command-kne"])
        assert result.exit_code == 127
        assert "Command not found" in result.error

    def test_timeout(self):
        result = run_command([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.5)
        assert result.timed_out
        assert result.exit_code == -1

    def test_replace_env(self):
        result = run_command(
            [sys.executable, "-c", "import os; print(os.environ.get('KNE_X', 'unset'))"],
            env={"KNE_X": "set"},
            replace_env=True,
        )
        assert result.stdout.strip() == "set"


class TestRunCommandWithStreaming:

    def test_streams_and_captures(self, capsys):
        result = run_command_with_streaming(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"],
        )
        captured = capsys.readouterr()
        assert result.success
        assert result.stdout == "out\n"
        assert result.stderr == "err\n"
        assert "out" in captured.out
        assert "err" in captured.err

    def test_partial_line_does_not_block_other_stream(self):
        """Progress dots without a newline while stderr overflows its pipe buffer."""
        script = (
            "import sys\n"
            "sys.stdout.write('...'); sys.stdout.flush()\n"
            "sys.stderr.write('e' * 200000); sys.stderr.flush()\n"
            "sys.stdout.write(' done\\n')\n"
        )
        result = run_command_with_streaming([sys.executable, "-c", script])
        assert result.success
        assert result.stdout == "... done\n"
        assert len(result.stderr) > 0

    def test_decodes_multibyte_output(self):
        result = run_command_with_streaming(
            [sys.executable, "-c", "import sys; sys.stdout.buffer.write('\\u2713 ok\\n'.encode('utf-8'))"],
        )
        assert result.stdout == "\u2713 ok\n"

    def test_writes_log_file(self, tmp_path: Path):
        log_path = tmp_path / "logs" / "run.log"
        result = run_command_with_streaming(
            [sys.executable, "-c", "print('logged')"], log_path=log_path,
        )
        content = log_path.read_text()
        assert result.log_path == log_path
        assert "logged" in content
        assert "# Exit code: 0" in content

    def test_exit_code_propagates(self):
        result = run_command_with_streaming([sys.executable, "-c", "import sys; sys.exit(2)"])
        assert result.exit_code == 2

    def test_missing_command(self):
        result = run_command_with_streaming(["definitely-not-a-real-command-kne"])
        assert result.exit_code == 127


class TestStopProcess:

    def test_stops_running_process(self):
        process = subprocess.Popen(
            [sys.executable, "-c", "import time; time.sleep(30)"],
            start_new_session=True,
        )
        start = time.time()
        assert stop_process(process, timeout=5) is True
        assert process.poll() is not None
        assert time.time() - start < 5

    def test_already_exited(self):
        process = subprocess.Popen([sys.executable, "-c", "pass"], start_new_session=True)
        process.wait()
        assert stop_process(process) is False


def test_which_finds_python():
    assert which(Path(sys.executable).name) is not None or which("python3") is not None
