import orjson

from projax.process_registry_helpers import BackgroundProcessEntry, RegistryFileStore


def _entry(pid):
    return BackgroundProcessEntry(
        pid=pid,
        project_path="/work/web",
        project_name="web",
        script_name="dev",
        command="npm run dev",
        started_at=1,
        log_file=f"/tmp/process-{pid}.log",
    )


def test_read_missing_file_is_empty(tmp_path):
    assert RegistryFileStore(tmp_path / "processes.json").read() == []


def test_corrupt_or_non_array_file_reads_as_empty(tmp_path):
    path = tmp_path / "processes.json"
    store = RegistryFileStore(path)

    path.write_text("{not json")
    assert store.read() == []

    path.write_text('{"pid": 1}')
    assert store.read() == []

    path.write_text("")
    assert store.read() == []


def test_malformed_records_are_dropped(tmp_path):
    path = tmp_path / "processes.json"
    path.write_bytes(orjson.dumps([_entry(1).to_dict(), {"pid": "x"}, "garbage", _entry(2).to_dict()]))

    assert [entry.pid for entry in RegistryFileStore(path).read()] == [1, 2]


def test_write_replaces_file_atomically(tmp_path):
    path = tmp_path / "nested" / "processes.json"
    store = RegistryFileStore(path)

    store.write([_entry(1), _entry(2)])

    assert [entry["pid"] for entry in orjson.loads(path.read_bytes())] == [1, 2]
    assert [p.name for p in path.parent.iterdir() if p.name.endswith(".tmp")] == []


def test_mutate_skips_write_when_nothing_changed(tmp_path):
    path = tmp_path / "processes.json"
    store = RegistryFileStore(path)

    result = store.mutate(lambda entries: (None, len(entries)))

    assert result == 0
    assert not path.exists()
    assert store.lock_path == tmp_path / "processes.json.lock"


def test_mutate_persists_new_entries(tmp_path):
    store = RegistryFileStore(tmp_path / "processes.json")

    store.mutate(lambda entries: (entries + [_entry(7)], None))
    store.mutate(lambda entries: (entries + [_entry(8)], None))

    assert [entry.pid for entry in store.read()] == [7, 8]
