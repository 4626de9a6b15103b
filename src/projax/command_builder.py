"""Turn a script descriptor into the executable and argv to spawn."""

from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from .script_models import ScriptDescriptor

_RUN_SUBCOMMAND_RUNNERS = frozenset({"npm", "pnpm"})
_BARE_SCRIPT_RUNNERS = frozenset({"yarn", "bun"})


@dataclass(frozen=True)
class SpawnCommand:
    executable: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    @property
    def display(self) -> str:
        return " ".join(self.argv)


def _command_tail(command: str) -> list[str]:
    """Everything after the first word, e.g. the module path in ``python app.main``."""
    return command.split()[1:]


def build_command(script: ScriptDescriptor, extra_args: Sequence[str] = ()) -> SpawnCommand:
    """
    Build the spawn command for ``script``.

    Package-manager runners reference the script by name, module runners run
    the command as a module path, anything else runs the literal command.
    """
    runner = script.runner_kind
    extra = list(extra_args)

    if runner in _RUN_SUBCOMMAND_RUNNERS:
        return SpawnCommand(runner, ("run", script.name, *extra))
    if runner in _BARE_SCRIPT_RUNNERS:
        return SpawnCommand(runner, (script.name, *extra))
    if runner == "python":
        return SpawnCommand("python", ("-m", *_command_tail(script.command), *extra))
    if runner == "poetry":
        module_path = " ".join(_command_tail(script.command))
        return SpawnCommand("poetry", ("run", "python", "-m", module_path, *extra))
    if runner == "cargo":
        if script.name == "run":
            return SpawnCommand("cargo", ("run", *extra))
        return SpawnCommand("cargo", (script.name, *extra))
    if runner == "go":
        if script.name == "run" and extra:
            return SpawnCommand("go", ("run", *extra))
        return SpawnCommand("go", (*_command_tail(script.command), *extra))
    if runner == "make":
        return SpawnCommand("make", (script.name, *extra))

    parts = script.command.split()
    if not parts:
        raise ValueError(f"Script {script.name!r} has an empty command")
    return SpawnCommand(parts[0], (*parts[1:], *extra))


def resolve_executable(command: SpawnCommand, *, platform: Optional[str] = None) -> SpawnCommand:
    """On Windows resolve ``npm`` to ``npm.cmd`` and friends so no shell is needed."""
    if (platform or sys.platform) != "win32":
        return command
    resolved = shutil.which(command.executable)
    if resolved is None:
        return command
    return SpawnCommand(resolved, command.args)


__all__ = ["SpawnCommand", "build_command", "resolve_executable"]
