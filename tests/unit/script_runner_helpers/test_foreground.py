import sys

import pytest

from projax.command_builder import SpawnCommand
from projax.errors import SpawnError
from projax.script_runner_helpers import run_streaming


@pytest.mark.asyncio
async def test_run_streaming_tees_and_accumulates_output(tmp_path):
    code = "import sys; print('ready'); sys.stderr.write('warn\\n'); sys.exit(4)"
    stdout_chunks = []
    stderr_chunks = []

    result = await run_streaming(
        SpawnCommand(sys.executable, ("-c", code)),
        str(tmp_path),
        stdout_sink=stdout_chunks.append,
        stderr_sink=stderr_chunks.append,
    )

    assert result.exit_code == 4
    assert result.stdout.strip() == "ready"
    assert result.stderr.strip() == "warn"
    assert b"".join(stdout_chunks).strip() == b"ready"
    assert b"".join(stderr_chunks).strip() == b"warn"
    assert result.combined_error_text.index("warn") < result.combined_error_text.index("ready")


@pytest.mark.asyncio
async def test_run_streaming_uses_project_directory(tmp_path):
    chunks = []

    await run_streaming(
        SpawnCommand(sys.executable, ("-c", "import os; print(os.getcwd())")),
        str(tmp_path),
        stdout_sink=chunks.append,
        stderr_sink=lambda data: None,
    )

    assert b"".join(chunks).decode().strip() == str(tmp_path.resolve())


@pytest.mark.asyncio
async def test_missing_executable_raises_spawn_error(tmp_path):
    with pytest.raises(SpawnError) as excinfo:
        await run_streaming(SpawnCommand("projax-definitely-missing-tool", ()), str(tmp_path))

    assert excinfo.value.command == "projax-definitely-missing-tool"
