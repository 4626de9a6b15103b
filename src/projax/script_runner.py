"""
Script Execution Engine

Drives one script run end to end: preflight port check, conflict
resolution, spawn, then either a live foreground stream with reactive
conflict detection or a detached background process tracked in the registry.

Usage:
    from projax.script_runner import build_engine

    engine = build_engine(settings, confirmer=click_confirm)
    exit_code = await engine.run_foreground(project, script, force=False)
    pid = await engine.run_background(project, script)
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence

from .command_builder import SpawnCommand, build_command, resolve_executable
from .config import ProjaxSettings
from .conflict_resolver import Confirmer, ConflictResolver
from .errors import PortConflictError, ScriptFailedError, SpawnError
from .output_utils import ConsoleFunc, make_console
from .port_extractor import extract_port
from .port_probe import PortProbe
from .port_records import PortRecordSource, ScanningPortRecordSource, scoped_urls
from .process_registry import ProcessRegistry
from .process_registry_helpers import BackgroundProcessEntry, now_millis
from .script_models import ProjectRef, ScriptDescriptor
from .script_runner_helpers import (
    ByteSink,
    FollowUpTasks,
    RetryBudget,
    append_exit_trailer,
    create_log_file,
    find_occupied_port,
    run_streaming,
    spawn_detached,
    watch_exit,
)
from .url_extractor import extract_urls

logger = logging.getLogger(__name__)


class EngineProbe(Protocol):
    async def is_port_in_use(self, port: int) -> bool: ...


class EngineResolver(Protocol):
    async def resolve(self, port: int, project_label: str, force: bool) -> bool: ...


class ScriptExecutionEngine:
    """Runs scripts with port-conflict handling and background tracking."""

    def __init__(
        self,
        probe: EngineProbe,
        resolver: EngineResolver,
        registry: ProcessRegistry,
        port_records: PortRecordSource,
        settings: ProjaxSettings,
        *,
        console: Optional[ConsoleFunc] = None,
        stdout_sink: Optional[ByteSink] = None,
        stderr_sink: Optional[ByteSink] = None,
        platform: Optional[str] = None,
    ) -> None:
        self._probe = probe
        self._resolver = resolver
        self._registry = registry
        self._port_records = port_records
        self._settings = settings
        self._console = console or make_console(settings.quiet)
        self._stdout_sink = stdout_sink
        self._stderr_sink = stderr_sink
        self._platform = platform
        self._follow_ups = FollowUpTasks()
        self._exit_watchers: Dict[int, asyncio.Task] = {}
        registry.add_removal_listener(self._follow_ups.cancel)

    @property
    def registry(self) -> ProcessRegistry:
        return self._registry

    async def run_foreground(
        self,
        project: ProjectRef,
        script: ScriptDescriptor,
        args: Sequence[str] = (),
        force: bool = False,
    ) -> int:
        """
        Run ``script`` attached to the terminal.

        Returns:
            0 once the script succeeds

        Raises:
            PortConflictError: a known port is held and could not be freed
            ScriptFailedError: the script exited non-zero
            SpawnError: the script could not be started
        """
        budget = RetryBudget(self._settings.max_conflict_retries)
        command = self._command_for(script, args)

        while True:
            if not await self._preflight(project, script, force, budget):
                continue

            self._console(f"Running: {command.display}")
            self._console(f"In directory: {project.path}\n")
            result = await run_streaming(
                command,
                project.path,
                stdout_sink=self._stdout_sink,
                stderr_sink=self._stderr_sink,
            )
            if result.exit_code == 0:
                return 0

            port = extract_port(result.combined_error_text)
            if port is None:
                raise ScriptFailedError(result.exit_code)
            logger.info("%s exited with %s after a conflict on port %s", script.name, result.exit_code, port)
            if budget.exhausted:
                logger.warning("Port %s is still in conflict after %d retr(ies); giving up", port, budget.used)
                raise ScriptFailedError(result.exit_code, port=port)
            if not await self._resolver.resolve(port, project.name, force):
                raise ScriptFailedError(result.exit_code, port=port)
            budget.consume()

    async def run_background(
        self,
        project: ProjectRef,
        script: ScriptDescriptor,
        args: Sequence[str] = (),
        force: bool = False,
    ) -> int:
        """
        Start ``script`` detached with its output in a log file.

        Returns:
            PID of the spawned process, already present in the registry

        Raises:
            PortConflictError: a known port is held and could not be freed
            SpawnError: the script could not be started or registered
        """
        budget = RetryBudget(self._settings.max_conflict_retries)
        while not await self._preflight(project, script, force, budget):
            pass

        command = self._command_for(script, args)
        log_path = await asyncio.to_thread(create_log_file, self._settings.logs_dir, script.name)
        process = await asyncio.to_thread(spawn_detached, command, project.path, log_path, platform=self._platform)

        entry = BackgroundProcessEntry(
            pid=process.pid,
            project_path=project.path,
            project_name=project.name,
            script_name=script.name,
            command=command.display,
            started_at=now_millis(),
            log_file=str(log_path),
        )
        try:
            await self._registry.add(entry)
        except OSError as exc:
            logger.error("Could not register background process %s; stopping it: %s", process.pid, exc)
            await asyncio.to_thread(_discard_unregistered, process, log_path)
            raise SpawnError(command.display, f"could not record the process in {self._registry.path}: {exc}") from exc

        self._console(f'✓ Started "{project.name}" ({script.name}) in background [PID: {process.pid}]')
        self._console(f"  Logs: {log_path}")
        self._console(f"  Command: {command.display}\n")

        self._exit_watchers[process.pid] = asyncio.create_task(
            self._watch_exit(process, entry), name=f"projax-exit-{process.pid}"
        )
        self._follow_ups.start(process.pid, self._scan_log_later(entry), name=f"projax-log-scan-{process.pid}")
        self._follow_ups.start(
            process.pid,
            self._record_urls_later(project, script, entry.pid),
            name=f"projax-port-urls-{process.pid}",
        )
        return process.pid

    async def wait_for_follow_ups(self) -> None:
        """Wait for every pending log scan and URL update to finish."""
        await self._follow_ups.wait()

    async def wait_for_exit(self, pid: int) -> Optional[int]:
        """Wait for a background process started by this engine; None if unknown."""
        watcher = self._exit_watchers.get(pid)
        if watcher is None:
            return None
        return await watcher

    def shutdown(self) -> None:
        """Stop watching background processes; the processes keep running."""
        self._follow_ups.cancel_all()
        for watcher in self._exit_watchers.values():
            watcher.cancel()
        self._exit_watchers.clear()

    def _command_for(self, script: ScriptDescriptor, args: Sequence[str]) -> SpawnCommand:
        return resolve_executable(build_command(script, args), platform=self._platform)

    async def _preflight(
        self,
        project: ProjectRef,
        script: ScriptDescriptor,
        force: bool,
        budget: RetryBudget,
    ) -> bool:
        """
        Check the script's known ports before spawning.

        Returns:
            True when the script may be spawned, False when a conflict was
            resolved and the run must start over
        """
        records = await asyncio.to_thread(self._port_records.records_for, project.path)
        port = await find_occupied_port(records, script.name, self._probe)
        if port is None:
            return True
        if budget.exhausted:
            if budget.used:
                raise PortConflictError.reoccupied(port, budget.used)
            raise PortConflictError(port, reason="Port is in use and automatic resolution is disabled")
        if not await self._resolver.resolve(port, project.name, force):
            raise PortConflictError(port)
        budget.consume()
        return False

    async def _watch_exit(self, process: subprocess.Popen, entry: BackgroundProcessEntry) -> int:
        returncode = await watch_exit(process, self._settings.exit_poll_interval_seconds)
        logger.info("Background process %s (%s) exited with %s", entry.pid, entry.script_name, returncode)
        try:
            # Pending log scans still run for processes that exit on their own.
            await self._registry.remove_by_pid(entry.pid, notify=False)
        except OSError as exc:
            logger.warning("Could not remove exited process %s from the registry: %s", entry.pid, exc)
        await asyncio.to_thread(append_exit_trailer, Path(entry.log_file), returncode)
        self._exit_watchers.pop(entry.pid, None)
        return returncode

    async def _scan_log_later(self, entry: BackgroundProcessEntry) -> None:
        await asyncio.sleep(self._settings.log_scan_delay_seconds)
        try:
            text = await asyncio.to_thread(Path(entry.log_file).read_text, encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.debug("Log %s not readable for scanning: %s", entry.log_file, exc)
            return

        port = extract_port(text)
        if port is not None:
            self._console(f"\n⚠️  Port conflict detected in background process: port {port} is in use")
            self._console(f"   Check log file: {entry.log_file}")
            self._console("   Run the script again with --force to auto-resolve port conflicts\n")

        urls = extract_urls(text)
        if urls:
            await self._registry.merge_urls(entry.pid, urls)

    async def _record_urls_later(self, project: ProjectRef, script: ScriptDescriptor, pid: int) -> None:
        await asyncio.sleep(self._settings.port_record_delay_seconds)
        records = await asyncio.to_thread(self._port_records.records_for, project.path)
        urls = scoped_urls(records, script.name)
        if urls:
            await self._registry.merge_urls(pid, urls)


def _discard_unregistered(process: subprocess.Popen, log_path: Path) -> None:
    process.kill()
    append_exit_trailer(log_path, process.wait())


def build_engine(
    settings: ProjaxSettings,
    *,
    confirmer: Optional[Confirmer] = None,
    port_records: Optional[PortRecordSource] = None,
    console: Optional[ConsoleFunc] = None,
) -> ScriptExecutionEngine:
    """Wire the default probe, resolver and registry for ``settings``."""
    console = console or make_console(settings.quiet)
    probe = PortProbe(timeout=settings.probe_timeout_seconds)
    resolver = ConflictResolver(probe, confirmer=confirmer, console=console)
    registry = ProcessRegistry(settings.registry_path)
    return ScriptExecutionEngine(
        probe,
        resolver,
        registry,
        port_records or ScanningPortRecordSource(),
        settings,
        console=console,
    )


__all__ = ["ScriptExecutionEngine", "build_engine"]
