from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from . import __version__
from .config import (
    ENV_SELENIUM_SERVER,
    InvocationConfig,
    load_settings,
    split_paths,
)
from .errors import ConfigurationError
from .exec import run_command, which
from .orchestrator import E2ERun
from .timeline import create_timeline_logger


LOG_FORMAT = "%(asctime)s:%(msecs)03d kne: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2

ENVIRONMENTS = ["default", "chrome", "saucelabs-local", "saucelabs-travis"]


def eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root = logging.getLogger("keystone_e2e")
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
    root.propagate = False


def split_passthrough(argv: List[str]) -> Tuple[List[str], List[str]]:
    """Split argv at "--" into (own args, pytest args)."""
    if "--" in argv:
        idx = argv.index("--")
        return argv[:idx], argv[idx + 1:]
    return argv, []


def add_run_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("-e", "--env", default="default",
                   help=f"Test environment from the settings file ({', '.join(ENVIRONMENTS)}, ...)")
    p.add_argument("--browser-name", default=None, help="Override the environment's browser")
    p.add_argument("--browser-version", default=None, help="Override the environment's browser version")
    p.add_argument("--test_paths", "--test-paths", dest="test_paths", default=None,
                   help="Comma separated test paths, appended to KNE_TEST_PATHS")
    p.add_argument("--po_paths", "--po-paths", dest="po_paths", default=None,
                   help="Comma separated page object directories, appended to KNE_PAGE_OBJECT_PATHS")
    p.add_argument("--exclude_paths", "--exclude-paths", dest="exclude_paths", default=None,
                   help="Comma separated glob patterns to skip, appended to KNE_EXCLUDE_TEST_PATHS")
    p.add_argument("--sauce-username", default=None, help="Sauce Labs user (saucelabs-local)")
    p.add_argument("--sauce-access-key", default=None, help="Sauce Labs access key (saucelabs-local)")
    p.add_argument("--selenium-in-background", action="store_true",
                   help="Start Selenium before the test runner (default env only)")
    p.add_argument("--app-host", default="localhost", help="Host of the running Keystone app")
    p.add_argument("--app-port", type=int, default=3000, help="Port of the running Keystone app")
    p.add_argument("--settings", default=None, help="Path to an e2e.yml settings file")
    p.add_argument("--timeline", default=None, help="Write a JSONL run timeline to this path")


def invocation_from_args(args: argparse.Namespace, pytest_args: Optional[List[str]] = None) -> InvocationConfig:
    return InvocationConfig(
        env=args.env,
        browser_name=args.browser_name,
        browser_version=args.browser_version,
        test_paths=split_paths(args.test_paths),
        page_object_paths=split_paths(args.po_paths),
        exclude_paths=split_paths(args.exclude_paths),
        sauce_username=args.sauce_username,
        sauce_access_key=args.sauce_access_key,
        selenium_in_background=args.selenium_in_background,
        app_host=args.app_host,
        app_port=args.app_port,
        settings_path=Path(args.settings) if args.settings else None,
        timeline_path=Path(args.timeline) if args.timeline else None,
        pytest_args=list(pytest_args or []),
    )


def parse_args(argv: List[str]) -> argparse.Namespace:
    """Parse run flags alone (no subcommand), as start_e2e(argv=...) passes them."""
    own, pytest_args = split_passthrough(list(argv))
    p = argparse.ArgumentParser(prog="keystone-e2e run")
    add_run_arguments(p)
    args = p.parse_args(own)
    args.pytest_args = pytest_args
    return args


def command_run(args: argparse.Namespace) -> int:
    invocation = invocation_from_args(args, getattr(args, "pytest_args", []))

    try:
        settings = load_settings(invocation.settings_path)
    except (FileNotFoundError, ValueError) as e:
        eprint(str(e))
        return EXIT_CONFIG_ERROR

    timeline = create_timeline_logger(invocation.timeline_path)
    error = E2ERun(invocation, settings=settings, timeline=timeline).execute()

    if error is None:
        return EXIT_OK
    if isinstance(error, ConfigurationError):
        return EXIT_CONFIG_ERROR
    return EXIT_RUN_FAILED


def _tool_check(name: str, cmd: List[str]) -> Dict[str, Any]:
    path = which(cmd[0])
    if not path:
        return {"name": name, "status": "missing", "cmd": cmd[0]}
    result = run_command(cmd, timeout=10)
    # java prints its version on stderr
    output = result.output.strip().splitlines()
    version = output[0] if result.success and output else None
    return {"name": name, "status": "ok", "cmd": cmd[0], "path": path, "version": version}


def command_scan(args: argparse.Namespace) -> int:
    settings_err: Optional[str] = None
    checks: List[Dict[str, Any]] = []
    jar_path: Optional[str] = None

    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
    except (FileNotFoundError, ValueError) as e:
        settings = None
        settings_err = str(e)

    if settings:
        checks.append(_tool_check("java", [settings.selenium.java, "-version"]))
        checks.append(_tool_check("sauce connect", [settings.sauce_connect.binary, "--version"]))
        jar_path = os.environ.get(ENV_SELENIUM_SERVER) or settings.selenium.server_path

    jar_ok = bool(jar_path) and Path(jar_path).exists()
    report: Dict[str, Any] = {
        "checks": checks,
        "settings": {
            "path": str(settings.path) if settings else args.settings,
            "ok": settings is not None,
            "error": settings_err,
            "environments": sorted(settings.environments) if settings else [],
        },
        "selenium_server": {"path": jar_path, "ok": jar_ok},
    }

    if args.json:
        print(json.dumps(report, indent=2))
        return EXIT_OK if settings else EXIT_CONFIG_ERROR

    print("KEYSTONE E2E ENVIRONMENT SCAN")
    print("-----------------------------")
    for c in checks:
        if c["status"] == "ok":
            print(f"✓ {c['name']}: {c.get('path')}")
        else:
            print(f"⚠ {c['name']}: not found")
    if settings:
        print(f"✓ settings: {settings.path}")
        print(f"  environments: {', '.join(report['settings']['environments'])}")
    else:
        print(f"✗ settings: {args.settings or '(bundled)'}")
        print(f"  {settings_err}")
    if jar_path:
        print(f"{'✓' if jar_ok else '⚠'} selenium server: {jar_path}")

    return EXIT_OK if settings else EXIT_CONFIG_ERROR


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="keystone-e2e", description="Keystone admin UI end-to-end test harness")
    p.add_argument("-V", "--version", action="version", version=f"keystone-e2e {__version__}")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("run", help="Run the suite (pytest arguments go after --)")
    add_run_arguments(sp)
    sp.set_defaults(func=command_run)

    sp = sub.add_parser("scan", help="Check java, Sauce Connect, the Selenium jar and settings")
    sp.add_argument("--settings", default=None, help="Path to an e2e.yml settings file")
    sp.add_argument("--json", action="store_true")
    sp.set_defaults(func=command_scan)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    own, pytest_args = split_passthrough(list(sys.argv[1:] if argv is None else argv))
    parser = build_parser()
    args = parser.parse_args(own)
    args.pytest_args = pytest_args
    configure_logging(args.log_level)
    rc = int(args.func(args))
    raise SystemExit(rc)
