"""Keystone E2E - end-to-end test harness for the Keystone admin UI."""

__all__ = [
    "__version__",
    "config",
    "errors",
    "timeline",
    "exec",
    "orchestrator",
    "start_e2e",
    "StartOptions",
    "E2ERun",
]

__version__ = "0.1.0"

from keystone_e2e import config
from keystone_e2e import errors
from keystone_e2e import timeline
from keystone_e2e import exec
from keystone_e2e import orchestrator
from keystone_e2e.orchestrator import E2ERun, StartOptions, start_e2e
