import sys

import pytest

from projax.port_probe_helpers import ProbeCommandError, run_command


@pytest.mark.asyncio
async def test_run_command_captures_output_and_exit_code():
    result = await run_command([sys.executable, "-c", "import sys; print('hi'); sys.exit(3)"], timeout=10)

    assert result.returncode == 3
    assert not result.ok
    assert result.stdout.strip() == "hi"


@pytest.mark.asyncio
async def test_run_command_reports_missing_executable():
    with pytest.raises(ProbeCommandError, match="not available"):
        await run_command(["projax-definitely-missing-tool"], timeout=1)


@pytest.mark.asyncio
async def test_run_command_times_out():
    with pytest.raises(ProbeCommandError, match="did not finish"):
        await run_command([sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.2)
