"""Tests for discovering declared ports in project files."""

import orjson

from projax.port_discovery import discover_ports


def _ports(records):
    return {(record.port, record.script_name, record.source) for record in records}


def test_discovers_ports_across_project_files(tmp_path):
    (tmp_path / "package.json").write_bytes(
        orjson.dumps(
            {
                "scripts": {
                    "dev": "vite --port 5173",
                    "start": "PORT=4000 node server.js",
                    "preview": "vite preview -p 4173",
                    "build": "vite build",
                }
            }
        )
    )
    (tmp_path / "vite.config.ts").write_text("export default defineConfig({\n  server: { port: 3000 },\n})\n")
    (tmp_path / ".env").write_text("# local\nVITE_PORT=8080\nAPI_URL=http://localhost:9000\n")

    records = discover_ports(str(tmp_path), now=123.0)

    assert _ports(records) == {
        (5173, "dev", "package.json"),
        (4000, "start", "package.json"),
        (4173, "preview", "package.json"),
        (3000, None, "vite.config.ts"),
        (8080, None, ".env"),
    }
    assert {record.last_detected_at for record in records} == {123.0}


def test_angular_serve_port(tmp_path):
    angular = {"projects": {"app": {"architect": {"serve": {"options": {"port": 4201}}}}, "lib": {}}}
    (tmp_path / "angular.json").write_bytes(orjson.dumps(angular))

    assert _ports(discover_ports(str(tmp_path))) == {(4201, None, "angular.json")}


def test_duplicate_ports_are_reported_once(tmp_path):
    (tmp_path / ".env").write_text("PORT=3000\n")
    (tmp_path / ".env.local").write_text("PORT=3000\n")

    assert _ports(discover_ports(str(tmp_path))) == {(3000, None, ".env")}


def test_malformed_files_are_skipped(tmp_path):
    (tmp_path / "package.json").write_text("{broken")
    (tmp_path / "angular.json").write_text("[]")

    assert discover_ports(str(tmp_path)) == []


def test_missing_project_directory_yields_nothing(tmp_path):
    assert discover_ports(str(tmp_path / "missing")) == []
