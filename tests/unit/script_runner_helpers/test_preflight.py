import pytest

from projax.port_records import PortRecord
from projax.script_runner_helpers import find_occupied_port


class FakeProbe:
    def __init__(self, busy):
        self.busy = set(busy)
        self.checked = []

    async def is_port_in_use(self, port):
        self.checked.append(port)
        return port in self.busy


def _record(port, script_name=None):
    return PortRecord(port=port, script_name=script_name, source="test", last_detected_at=0.0)


@pytest.mark.asyncio
async def test_returns_first_busy_scoped_port():
    probe = FakeProbe(busy={3001})
    records = [_record(3000, "dev"), _record(3001, "dev"), _record(8080)]

    assert await find_occupied_port(records, "dev", probe) == 3001
    assert probe.checked == [3000, 3001]


@pytest.mark.asyncio
async def test_checks_project_records_when_script_has_none():
    probe = FakeProbe(busy={8080})

    assert await find_occupied_port([_record(8080), _record(8080, "storybook")], "dev", probe) == 8080


@pytest.mark.asyncio
async def test_each_port_is_probed_once():
    probe = FakeProbe(busy=set())

    assert await find_occupied_port([_record(3000), _record(3000)], "dev", probe) is None
    assert probe.checked == [3000]


@pytest.mark.asyncio
async def test_no_records_means_nothing_to_check():
    probe = FakeProbe(busy={3000})

    assert await find_occupied_port([], "dev", probe) is None
    assert probe.checked == []
