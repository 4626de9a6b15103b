"""Tests for port extraction from process output."""

import pytest

from projax.port_extractor import extract_port, is_valid_port


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Port 3000 is already in use", 3000),
        ("Error: listen EADDRINUSE: address already in use 0.0.0.0:4000", 4000),
        ("Error: listen EADDRINUSE: address already in use :::5173", 5173),
        ("Error: listen EADDRINUSE: address already in use 127.0.0.1:8080", 8080),
        ("OSError: [Errno 98] Address already in use: 5432", 5432),
        ("Failed to bind :3001 (EADDRINUSE)", 3001),
        ("Port 4200 is taken", 4200),
    ],
)
def test_extract_port_recognizes_common_messages(text, expected):
    assert extract_port(text) == expected


def test_extract_port_returns_none_without_conflict():
    assert extract_port("Compiled successfully in 1.2s") is None
    assert extract_port("") is None
    assert extract_port(None) is None


def test_extract_port_skips_out_of_range_numbers():
    assert extract_port("Port 99999 is already in use") is None
    assert extract_port("Port 0 is already in use") is None


def test_extract_port_prefers_earliest_match():
    text = "\n".join(
        [
            "Port 3000 is already in use",
            "    at Server.listen (node:net:1234)",
            "Error: listen EADDRINUSE: address already in use 0.0.0.0:4000",
        ]
    )
    assert extract_port(text) == 3000


def test_extract_port_finds_conflict_inside_stack_trace():
    text = (
        "node:events:491\n"
        "      throw er; // Unhandled 'error' event\n"
        "      ^\n\n"
        "Error: listen EADDRINUSE: address already in use :::3000\n"
        "    at Server.setupListenHandle [as _listen2] (node:net:1817:16)\n"
    )
    assert extract_port(text) == 3000


def test_is_valid_port_bounds():
    assert is_valid_port(1)
    assert is_valid_port(65535)
    assert not is_valid_port(0)
    assert not is_valid_port(65536)
