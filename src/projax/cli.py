"""
Command line entry point for running and managing project scripts.

    projax-run run ~/code/web dev --background -- --port 3001
    projax-run ps
    projax-run stop 12345
    projax-run stop-project ~/code/web
    projax-run stop-port 3000
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import orjson

from .config import ConfigurationError, ProjaxSettings, get_settings
from .conflict_resolver import click_confirm
from .errors import ProjaxError, ScriptFailedError, ScriptNotFoundError
from .logging_config import setup_logging
from .port_probe import PortProbe
from .process_registry import ProcessRegistry
from .script_models import ProjectRef, ScriptDescriptor
from .script_runner import build_engine

logger = logging.getLogger(__name__)

# First match wins; npm is the default for package.json projects.
_LOCKFILE_RUNNERS = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
)


def _package_json_scripts(project_dir: Path) -> Optional[dict]:
    package_json = project_dir / "package.json"
    if not package_json.is_file():
        return None
    try:
        data = orjson.loads(package_json.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        logger.warning("Could not read %s: %s", package_json, exc)
        return None
    scripts = data.get("scripts") if isinstance(data, dict) else None
    return scripts if isinstance(scripts, dict) else {}


def resolve_script(
    project_dir: Path,
    script_name: str,
    *,
    runner: Optional[str] = None,
    command: Optional[str] = None,
) -> ScriptDescriptor:
    """
    Resolve ``script_name`` for a project directory.

    An explicit runner/command wins. Otherwise package.json scripts are used
    with the runner implied by the lockfile, and anything else is run as a
    literal command.

    Raises:
        ScriptNotFoundError: package.json exists but does not define the script
    """
    if runner:
        return ScriptDescriptor(name=script_name, command=command or script_name, runner_kind=runner)

    scripts = _package_json_scripts(project_dir)
    if scripts is not None:
        if script_name not in scripts:
            raise ScriptNotFoundError(script_name)
        package_runner = "npm"
        for lockfile, lock_runner in _LOCKFILE_RUNNERS:
            if (project_dir / lockfile).exists():
                package_runner = lock_runner
                break
        return ScriptDescriptor(
            name=script_name,
            command=str(scripts[script_name]),
            runner_kind=package_runner,
            project_kind="node",
        )

    return ScriptDescriptor(name=script_name, command=command or script_name, runner_kind="shell")


def _format_started(started_at_ms: int) -> str:
    return datetime.fromtimestamp(started_at_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


async def _run(args: argparse.Namespace, settings: ProjaxSettings) -> int:
    project_dir = Path(args.path).expanduser().resolve()
    if not project_dir.is_dir():
        print(f"Project directory not found: {project_dir}", file=sys.stderr)
        return 1

    project = ProjectRef(path=str(project_dir), name=args.name or project_dir.name)
    script = resolve_script(project_dir, args.script, runner=args.runner, command=args.command)
    confirmer = click_confirm if sys.stdin.isatty() else None
    engine = build_engine(settings, confirmer=confirmer)

    if args.background:
        await engine.run_background(project, script, args.script_args, force=args.force)
        await engine.wait_for_follow_ups()
        engine.shutdown()
        return 0
    return await engine.run_foreground(project, script, args.script_args, force=args.force)


async def _ps(settings: ProjaxSettings) -> int:
    registry = ProcessRegistry(settings.registry_path)
    entries = await registry.list_live()
    if not entries:
        print("No background processes running.")
        return 0

    for entry in entries:
        print(f"{entry.pid:>7}  {entry.project_name} ({entry.script_name})  started {_format_started(entry.started_at)}")
        print(f"         {entry.command}")
        for url in entry.detected_urls:
            print(f"         {url}")
        print(f"         log: {entry.log_file}")
    return 0


async def _stop(pid: int, settings: ProjaxSettings) -> int:
    registry = ProcessRegistry(settings.registry_path)
    if await registry.stop(pid):
        print(f"✓ Stopped process {pid}")
        return 0
    print(f"Process {pid} is not tracked", file=sys.stderr)
    return 1


async def _stop_project(path: str, settings: ProjaxSettings) -> int:
    registry = ProcessRegistry(settings.registry_path)
    project_path = str(Path(path).expanduser().resolve())
    stopped = await registry.stop_project(project_path)
    print(f"✓ Stopped {stopped} process(es)")
    return 0


async def _stop_port(port: int, settings: ProjaxSettings) -> int:
    registry = ProcessRegistry(settings.registry_path)
    probe = PortProbe(timeout=settings.probe_timeout_seconds)
    if await registry.stop_by_port(port, probe):
        print(f"✓ Stopped the process on port {port}")
        return 0
    print(f"No process could be stopped on port {port}", file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="projax-run", description="Run project scripts without port collisions")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging on the console")
    subparsers = parser.add_subparsers(dest="action", required=True)

    run_parser = subparsers.add_parser("run", help="Run a project script")
    run_parser.add_argument("path", help="Project directory")
    run_parser.add_argument("script", help="Script name")
    run_parser.add_argument("--name", help="Project name (default: directory name)")
    run_parser.add_argument("--runner", help="Runner kind, e.g. npm, yarn, python, cargo, make")
    run_parser.add_argument("--command", help="Script command when it is not read from package.json")
    run_parser.add_argument("-b", "--background", action="store_true", help="Run detached with output in a log file")
    run_parser.add_argument("-F", "--force", action="store_true", help="Kill port owners without asking")

    subparsers.add_parser("ps", help="List running background processes")

    stop_parser = subparsers.add_parser("stop", help="Stop a background process")
    stop_parser.add_argument("pid", type=int)

    stop_project_parser = subparsers.add_parser("stop-project", help="Stop every background process of a project")
    stop_project_parser.add_argument("path")

    stop_port_parser = subparsers.add_parser("stop-port", help="Stop the process listening on a port")
    stop_port_parser.add_argument("port", type=int)
    return parser


async def _dispatch(args: argparse.Namespace, settings: ProjaxSettings) -> int:
    if args.action == "run":
        return await _run(args, settings)
    if args.action == "ps":
        return await _ps(settings)
    if args.action == "stop":
        return await _stop(args.pid, settings)
    if args.action == "stop-project":
        return await _stop_project(args.path, settings)
    return await _stop_port(args.port, settings)


def split_script_args(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split ``argv`` at the first ``--``; everything after it goes to the script."""
    arguments = list(argv)
    if "--" not in arguments:
        return arguments, []
    separator = arguments.index("--")
    return arguments[:separator], arguments[separator + 1 :]


def main(argv: Optional[Sequence[str]] = None) -> int:
    own_args, script_args = split_script_args(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(own_args)
    args.script_args = script_args

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging("projax", user_friendly=not args.verbose, log_dir=settings.data_dir)

    try:
        return asyncio.run(_dispatch(args, settings))
    except ScriptFailedError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code or 1
    except (ProjaxError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


__all__ = ["build_parser", "main", "resolve_script", "split_script_args"]


if __name__ == "__main__":
    sys.exit(main())


