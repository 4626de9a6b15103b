"""Tests for port record selection and sources."""

from projax.port_records import (
    STALE_AFTER_SECONDS,
    PortRecord,
    ScanningPortRecordSource,
    StaticPortRecordSource,
    is_stale,
    needs_rescan,
    scoped_urls,
    select_preflight_records,
)

NOW = 1_700_000_000.0


def _record(port, script_name=None, detected_at=NOW):
    return PortRecord(port=port, script_name=script_name, source="package.json", last_detected_at=detected_at)


def test_staleness_threshold_is_one_day():
    assert not is_stale(_record(3000, detected_at=NOW - STALE_AFTER_SECONDS + 1), now=NOW)
    assert is_stale(_record(3000, detected_at=NOW - STALE_AFTER_SECONDS), now=NOW)


def test_needs_rescan_when_empty_or_any_record_stale():
    assert needs_rescan([], now=NOW)
    assert not needs_rescan([_record(3000)], now=NOW)
    assert needs_rescan([_record(3000), _record(4000, detected_at=0)], now=NOW)


def test_preflight_prefers_script_scoped_records():
    records = [_record(3000, "dev"), _record(6006, "storybook"), _record(8080)]

    assert select_preflight_records(records, "dev") == [_record(3000, "dev")]


def test_preflight_falls_back_to_all_project_records():
    records = [_record(6006, "storybook"), _record(8080)]

    assert select_preflight_records(records, "dev") == records


def test_scoped_urls_only_covers_the_script():
    records = [_record(3000, "dev"), _record(3000, "dev"), _record(3001, "dev"), _record(8080)]

    assert scoped_urls(records, "dev") == ["http://localhost:3000", "http://localhost:3001"]
    assert scoped_urls(records, "build") == []


def test_static_source_normalizes_project_paths(tmp_path):
    source = StaticPortRecordSource({str(tmp_path): [_record(3000, "dev")]})

    assert source.records_for(str(tmp_path / "sub" / "..")) == [_record(3000, "dev")]
    assert source.records_for(str(tmp_path / "other")) == []


def test_scanning_source_caches_until_stale(tmp_path):
    clock = [NOW]
    scans = []

    def scanner(project_path):
        scans.append(project_path)
        return [_record(3000, "dev", detected_at=clock[0])]

    source = ScanningPortRecordSource(scanner, clock=lambda: clock[0])

    source.records_for(str(tmp_path))
    source.records_for(str(tmp_path))
    assert len(scans) == 1

    clock[0] += STALE_AFTER_SECONDS
    source.records_for(str(tmp_path))
    assert len(scans) == 2
