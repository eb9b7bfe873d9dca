"""Run timeline logger.

Appends one JSON object per line to a timeline file so a CI job can
reconstruct what the harness did (server, tunnel, tests, cleanup) after
the fact.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


def utc_now_iso() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class EventType(str, Enum):
    """Timeline event types."""
    # Run events
    RUN_START = "run_start"
    RUN_END = "run_end"

    # Selenium server events
    SERVER_START = "server_start"
    SERVER_READY = "server_ready"
    SERVER_FAILED = "server_failed"
    SERVER_STOPPED = "server_stopped"

    # Tunnel events
    TUNNEL_START = "tunnel_start"
    TUNNEL_READY = "tunnel_ready"
    TUNNEL_FAILED = "tunnel_failed"
    TUNNEL_STOPPED = "tunnel_stopped"

    # Test runner events
    TESTS_START = "tests_start"
    TESTS_PASS = "tests_pass"
    TESTS_FAIL = "tests_fail"

    CLEANUP = "cleanup"


class TimelineLogger:
    """Logger for run events in JSONL format.

    Each event is written as a single JSON line with at minimum:
    - ts: ISO 8601 timestamp
    - event: Event type from EventType enum
    """

    def __init__(self, timeline_path: Path, run_id: Optional[str] = None):
        """Initialize timeline logger.

        Args:
            timeline_path: Path to the timeline.jsonl file.
            run_id: Identifier included in every event.
        """
        self.timeline_path = timeline_path
        self.run_id = run_id

        self.timeline_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.timeline_path.exists():
            self.timeline_path.touch()

    def log(
        self,
        event: EventType,
        env: Optional[str] = None,
        status: Optional[str] = None,
        duration_ms: Optional[int] = None,
        error: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Log an event to the timeline.

        Returns:
            The event dict that was written.
        """
        event_data: Dict[str, Any] = {
            "ts": utc_now_iso(),
            "event": event.value if isinstance(event, EventType) else event,
        }

        if self.run_id:
            event_data["run_id"] = self.run_id
        if env is not None:
            event_data["env"] = env
        if status is not None:
            event_data["status"] = status
        if duration_ms is not None:
            event_data["duration_ms"] = duration_ms
        if error is not None:
            event_data["error"] = error
        if details is not None:
            event_data["details"] = details

        line = json.dumps(event_data, separators=(",", ":")) + "\n"
        with self.timeline_path.open("a", encoding="utf-8") as f:
            f.write(line)

        return event_data

    def run_start(self, env: str, test_paths: List[str]) -> Dict[str, Any]:
        return self.log(EventType.RUN_START, env=env, details={"test_paths": test_paths})

    def run_end(self, status: str, error: Optional[str] = None,
                duration_ms: Optional[int] = None) -> Dict[str, Any]:
        return self.log(EventType.RUN_END, status=status, error=error, duration_ms=duration_ms)

    def server_start(self, command: str) -> Dict[str, Any]:
        return self.log(EventType.SERVER_START, details={"command": command})

    def server_ready(self, pid: int, duration_ms: int) -> Dict[str, Any]:
        return self.log(
            EventType.SERVER_READY,
            status="ready",
            duration_ms=duration_ms,
            details={"pid": pid},
        )

    def server_failed(self, error: str, exit_code: Optional[int] = None) -> Dict[str, Any]:
        return self.log(
            EventType.SERVER_FAILED,
            status="failed",
            error=error,
            details={"exit_code": exit_code},
        )

    def server_stopped(self, signalled: bool) -> Dict[str, Any]:
        return self.log(EventType.SERVER_STOPPED, details={"signalled": signalled})

    def tunnel_start(self, tunnel_identifier: Optional[str]) -> Dict[str, Any]:
        return self.log(EventType.TUNNEL_START, details={"tunnel_identifier": tunnel_identifier})

    def tunnel_ready(self, duration_ms: int) -> Dict[str, Any]:
        return self.log(EventType.TUNNEL_READY, status="ready", duration_ms=duration_ms)

    def tunnel_failed(self, error: str) -> Dict[str, Any]:
        return self.log(EventType.TUNNEL_FAILED, status="failed", error=error)

    def tunnel_stopped(self) -> Dict[str, Any]:
        return self.log(EventType.TUNNEL_STOPPED)

    def tests_start(self, command: str) -> Dict[str, Any]:
        return self.log(EventType.TESTS_START, details={"command": command})

    def tests_pass(self, duration_ms: int) -> Dict[str, Any]:
        return self.log(EventType.TESTS_PASS, status="pass", duration_ms=duration_ms)

    def tests_fail(self, error: str, duration_ms: Optional[int] = None) -> Dict[str, Any]:
        return self.log(EventType.TESTS_FAIL, status="fail", error=error, duration_ms=duration_ms)

    def cleanup(self, server_stopped: bool, tunnel_stopped: bool) -> Dict[str, Any]:
        return self.log(
            EventType.CLEANUP,
            details={"server_stopped": server_stopped, "tunnel_stopped": tunnel_stopped},
        )

    def read_events(self) -> List[Dict[str, Any]]:
        """Read all events from the timeline file."""
        events: List[Dict[str, Any]] = []
        if not self.timeline_path.exists():
            return events
        with self.timeline_path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    events.append(json.loads(line))
        return events

    def get_events_by_type(self, event_type: EventType) -> List[Dict[str, Any]]:
        """Get all events of a specific type."""
        return [e for e in self.read_events() if e.get("event") == event_type.value]


def create_timeline_logger(path: Optional[Path], run_id: Optional[str] = None) -> Optional[TimelineLogger]:
    """Create a timeline logger, or None when no path is configured."""
    if path is None:
        return None
    return TimelineLogger(Path(path), run_id=run_id)
