"""Discover the ports a project declares in its configuration files."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Any, Iterable, List, Optional, Pattern, Sequence

import orjson

from .port_extractor import is_valid_port
from .port_records import PortRecord

logger = logging.getLogger(__name__)

_SCRIPT_PORT_PATTERNS = (
    re.compile(r"--port[\s=]+(\d+)", re.IGNORECASE),
    re.compile(r"(?:^|\s)-p\s+(\d+)", re.IGNORECASE),
    re.compile(r"\b(?:VITE_|NEXT_)?PORT\s*=\s*(\d+)", re.IGNORECASE),
)

_VITE_PATTERNS = (
    re.compile(r"server\s*:\s*\{[^}]*port\s*:\s*['\"]?(\d+)", re.IGNORECASE),
    re.compile(r"port\s*:\s*['\"]?(\d+)", re.IGNORECASE),
)
_NEXT_PATTERNS = (
    re.compile(r"devServer\s*:\s*\{[^}]*port\s*:\s*(\d+)", re.IGNORECASE),
    re.compile(r"port\s*:\s*(\d+)", re.IGNORECASE),
)
_WEBPACK_PATTERNS = (re.compile(r"devServer\s*:\s*\{[^}]*port\s*:\s*['\"]?(\d+)", re.IGNORECASE),)
_NUXT_PATTERNS = (re.compile(r"server\s*:\s*\{[^}]*port\s*:\s*['\"]?(\d+)", re.IGNORECASE),)

_CONFIG_FILES: Sequence[tuple[Sequence[str], Sequence[Pattern[str]]]] = (
    (("vite.config.js", "vite.config.ts", "vite.config.mjs", "vite.config.cjs"), _VITE_PATTERNS),
    (("next.config.js", "next.config.ts", "next.config.mjs"), _NEXT_PATTERNS),
    (("webpack.config.js", "webpack.config.ts"), _WEBPACK_PATTERNS),
    (("nuxt.config.js", "nuxt.config.ts"), _NUXT_PATTERNS),
)

_ENV_FILES = (".env", ".env.local", ".env.development", ".env.production")
_ENV_PORT_PATTERN = re.compile(r"^(?:VITE_|NEXT_|REACT_APP_)?PORT\s*=\s*['\"]?(\d+)", re.IGNORECASE)


def discover_ports(project_path: str, *, now: Optional[float] = None) -> List[PortRecord]:
    """Scan ``project_path`` for declared ports; unreadable files are skipped."""
    root = Path(project_path)
    detected_at = time.time() if now is None else now

    found: list[tuple[int, Optional[str], str]] = []
    found.extend(_from_package_json(root))
    for filenames, patterns in _CONFIG_FILES:
        for filename in filenames:
            port = _first_port(_read_text(root / filename), patterns)
            if port is not None:
                found.append((port, None, filename))
    found.extend(_from_angular_json(root))
    found.extend(_from_env_files(root))

    records: dict[tuple[int, Optional[str]], PortRecord] = {}
    for port, script_name, source in found:
        records.setdefault(
            (port, script_name),
            PortRecord(port=port, script_name=script_name, source=source, last_detected_at=detected_at),
        )
    return list(records.values())


def _read_text(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:  # policy_guard: allow-silent-handler
        logger.debug("Skipping unreadable %s: %s", path, exc)
        return None


def _read_json(path: Path) -> Any:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError:  # policy_guard: allow-silent-handler
        logger.debug("Skipping malformed %s", path)
        return None


def _first_port(text: Optional[str], patterns: Iterable[Pattern[str]]) -> Optional[int]:
    if not text:
        return None
    for pattern in patterns:
        match = pattern.search(text)
        if match and is_valid_port(int(match.group(1))):
            return int(match.group(1))
    return None


def _from_package_json(root: Path) -> List[tuple[int, Optional[str], str]]:
    payload = _read_json(root / "package.json")
    if not isinstance(payload, dict):
        return []
    scripts = payload.get("scripts")
    if not isinstance(scripts, dict):
        return []

    found: list[tuple[int, Optional[str], str]] = []
    for script_name, command in scripts.items():
        if not isinstance(command, str):
            continue
        port = _first_port(command, _SCRIPT_PORT_PATTERNS)
        if port is not None:
            found.append((port, str(script_name), "package.json"))
    return found


def _from_angular_json(root: Path) -> List[tuple[int, Optional[str], str]]:
    payload = _read_json(root / "angular.json")
    if not isinstance(payload, dict) or not isinstance(payload.get("projects"), dict):
        return []

    found: list[tuple[int, Optional[str], str]] = []
    for project in payload["projects"].values():
        try:
            raw_port = project["architect"]["serve"]["options"]["port"]
            port = int(raw_port)
        except (KeyError, TypeError, ValueError):  # policy_guard: allow-silent-handler
            continue
        if is_valid_port(port):
            found.append((port, None, "angular.json"))
    return found


def _from_env_files(root: Path) -> List[tuple[int, Optional[str], str]]:
    found: list[tuple[int, Optional[str], str]] = []
    for filename in _ENV_FILES:
        text = _read_text(root / filename)
        if not text:
            continue
        for line in text.splitlines():
            stripped = line.strip()
            if stripped.startswith("#"):
                continue
            match = _ENV_PORT_PATTERN.match(stripped)
            if match and is_valid_port(int(match.group(1))):
                found.append((int(match.group(1)), None, filename))
    return found


__all__ = ["discover_ports"]
