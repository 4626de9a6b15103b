from types import SimpleNamespace

import psutil

from projax.port_probe_helpers import process_terminator


def _install_process(monkeypatch, factory):
    monkeypatch.setattr(process_terminator.psutil, "Process", factory)


def test_force_kill_returns_true_when_signal_delivered(monkeypatch):
    killed = []
    _install_process(monkeypatch, lambda pid: SimpleNamespace(kill=lambda: killed.append(pid)))

    assert process_terminator.force_kill(42) is True
    assert killed == [42]


def test_force_kill_returns_false_for_missing_process(monkeypatch):
    def factory(pid):
        raise psutil.NoSuchProcess(pid)

    _install_process(monkeypatch, factory)

    assert process_terminator.force_kill(42) is False


def test_force_kill_returns_false_when_access_denied(monkeypatch):
    def deny():
        raise psutil.AccessDenied(42)

    _install_process(monkeypatch, lambda pid: SimpleNamespace(kill=deny))

    assert process_terminator.force_kill(42) is False


def test_read_process_name_falls_back_to_unknown(monkeypatch):
    _install_process(monkeypatch, lambda pid: SimpleNamespace(name=lambda: "node"))
    assert process_terminator.read_process_name(42) == "node"

    def factory(pid):
        raise psutil.NoSuchProcess(pid)

    _install_process(monkeypatch, factory)
    assert process_terminator.read_process_name(42) == "unknown"
