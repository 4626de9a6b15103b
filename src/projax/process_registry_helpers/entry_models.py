from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping


def now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class BackgroundProcessEntry:
    """A detached script process launched by the runner."""

    pid: int
    project_path: str
    project_name: str
    script_name: str
    command: str
    started_at: int
    log_file: str
    detected_urls: List[str] = field(default_factory=list)

    def with_urls(self, urls: List[str]) -> "BackgroundProcessEntry":
        return replace(self, detected_urls=list(urls))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the registry file's field names."""
        payload: Dict[str, Any] = {
            "pid": self.pid,
            "projectPath": self.project_path,
            "projectName": self.project_name,
            "scriptName": self.script_name,
            "command": self.command,
            "startedAt": self.started_at,
            "logFile": self.log_file,
        }
        if self.detected_urls:
            payload["detectedUrls"] = list(self.detected_urls)
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BackgroundProcessEntry":
        """
        Parse one registry record.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        pid = payload.get("pid")
        if isinstance(pid, bool) or not isinstance(pid, int) or pid <= 0:
            raise ValueError(f"Invalid pid in registry entry: {pid!r}")

        text_fields = {}
        for key in ("projectPath", "projectName", "scriptName", "command", "logFile"):
            value = payload.get(key)
            if not isinstance(value, str):
                raise ValueError(f"Registry entry {pid} has invalid {key}: {value!r}")
            text_fields[key] = value

        started_at = payload.get("startedAt")
        if isinstance(started_at, bool) or not isinstance(started_at, (int, float)):
            raise ValueError(f"Registry entry {pid} has invalid startedAt: {started_at!r}")

        raw_urls = payload.get("detectedUrls") or []
        urls = [url for url in raw_urls if isinstance(url, str)] if isinstance(raw_urls, list) else []

        return cls(
            pid=pid,
            project_path=text_fields["projectPath"],
            project_name=text_fields["projectName"],
            script_name=text_fields["scriptName"],
            command=text_fields["command"],
            started_at=int(started_at),
            log_file=text_fields["logFile"],
            detected_urls=urls,
        )
