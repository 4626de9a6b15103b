"""Tests for the command line entry point."""

import functools

import orjson
import pytest

from projax import cli
from projax.errors import ScriptNotFoundError
from projax.process_registry import ProcessRegistry
from projax.process_registry_helpers import BackgroundProcessEntry


def test_split_script_args():
    assert cli.split_script_args(["run", ".", "dev", "--", "--port", "3001"]) == (["run", ".", "dev"], ["--port", "3001"])
    assert cli.split_script_args(["ps"]) == (["ps"], [])


def test_resolve_script_uses_package_json_and_lockfile(tmp_path):
    (tmp_path / "package.json").write_bytes(orjson.dumps({"scripts": {"dev": "vite"}}))
    (tmp_path / "yarn.lock").write_text("")

    script = cli.resolve_script(tmp_path, "dev")

    assert script.runner_kind == "yarn"
    assert script.command == "vite"
    assert script.project_kind == "node"


def test_resolve_script_missing_from_package_json(tmp_path):
    (tmp_path / "package.json").write_bytes(orjson.dumps({"scripts": {"dev": "vite"}}))

    with pytest.raises(ScriptNotFoundError):
        cli.resolve_script(tmp_path, "storybook")


def test_resolve_script_explicit_runner_and_literal_command(tmp_path):
    assert cli.resolve_script(tmp_path, "build", runner="make").runner_kind == "make"

    literal = cli.resolve_script(tmp_path, "serve", command="python -m http.server 8000")
    assert literal.runner_kind == "shell"
    assert literal.command == "python -m http.server 8000"


@pytest.fixture
def data_dir(tmp_path, monkeypatch, restore_root_logging):
    path = tmp_path / "data"
    monkeypatch.setenv("PROJAX_DATA_DIR", str(path))
    return path


def test_ps_with_empty_registry(data_dir, capsys):
    assert cli.main(["ps"]) == 0
    assert "No background processes running." in capsys.readouterr().out


def test_stop_untracked_pid_fails(data_dir, capsys):
    assert cli.main(["stop", "999999"]) == 1
    assert "not tracked" in capsys.readouterr().err


def test_stop_project_reports_count(data_dir, tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(cli, "ProcessRegistry", functools.partial(ProcessRegistry, liveness=lambda pid: False))
    project = tmp_path / "web"
    project.mkdir()
    data_dir.mkdir()
    entry = BackgroundProcessEntry(
        pid=999999,
        project_path=str(project.resolve()),
        project_name="web",
        script_name="dev",
        command="npm run dev",
        started_at=1,
        log_file=str(tmp_path / "process-1-dev.log"),
    )
    (data_dir / "processes.json").write_bytes(orjson.dumps([entry.to_dict()]))

    assert cli.main(["stop-project", str(project)]) == 0
    assert "Stopped 1 process(es)" in capsys.readouterr().out
    assert orjson.loads((data_dir / "processes.json").read_bytes()) == []


def test_invalid_configuration_exits_with_2(data_dir, monkeypatch, capsys):
    monkeypatch.setenv("PROJAX_MAX_CONFLICT_RETRIES", "lots")

    assert cli.main(["ps"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_run_missing_project_directory(data_dir, tmp_path, capsys):
    assert cli.main(["run", str(tmp_path / "missing"), "dev"]) == 1
    assert "Project directory not found" in capsys.readouterr().err
