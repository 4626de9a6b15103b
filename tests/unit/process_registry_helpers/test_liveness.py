import os
from types import SimpleNamespace

import psutil

from projax.process_registry_helpers import is_process_alive
from projax.process_registry_helpers import liveness


def test_current_process_is_alive():
    assert is_process_alive(os.getpid()) is True


def test_missing_pid_is_dead(monkeypatch):
    monkeypatch.setattr(liveness.psutil, "pid_exists", lambda pid: False)

    assert is_process_alive(123456) is False


def test_zombie_is_dead(monkeypatch):
    monkeypatch.setattr(liveness.psutil, "pid_exists", lambda pid: True)
    monkeypatch.setattr(liveness.psutil, "Process", lambda pid: SimpleNamespace(status=lambda: psutil.STATUS_ZOMBIE))

    assert is_process_alive(123456) is False


def test_access_denied_counts_as_alive(monkeypatch):
    def deny(pid):
        raise psutil.AccessDenied(pid)

    monkeypatch.setattr(liveness.psutil, "pid_exists", lambda pid: True)
    monkeypatch.setattr(liveness.psutil, "Process", deny)

    assert is_process_alive(1) is True
