from projax.port_probe_helpers import posix_tools

LINUX_NETSTAT = """Active Internet connections (servers and established)
Proto Recv-Q Send-Q Local Address           Foreign Address         State
tcp        0      0 0.0.0.0:3000            0.0.0.0:*               LISTEN
tcp        0      0 127.0.0.1:54012         127.0.0.1:5432          ESTABLISHED
tcp6       0      0 :::8080                 :::*                    LISTEN
udp        0      0 0.0.0.0:5353            0.0.0.0:*
"""

MACOS_NETSTAT = """Active Internet connections (including servers)
Proto Recv-Q Send-Q  Local Address          Foreign Address        (state)
tcp4       0      0  *.5173                 *.*                    LISTEN
tcp4       0      0  192.168.1.5.62000      140.82.112.4.443       ESTABLISHED
"""


def test_lsof_argv_selects_tcp_listeners():
    assert posix_tools.lsof_listen_argv(3000) == ["lsof", "-nP", "-t", "-iTCP:3000", "-sTCP:LISTEN"]
    assert posix_tools.lsof_bound_argv(3000) == ["lsof", "-nP", "-t", "-i:3000", "-sTCP:LISTEN"]


def test_parse_pid_lines_dedupes_and_skips_noise():
    assert posix_tools.parse_pid_lines("123\n456\n\n123\nlsof: WARNING\n") == [123, 456]


def test_netstat_shows_listener_on_linux():
    assert posix_tools.netstat_shows_listener(LINUX_NETSTAT, 3000)
    assert posix_tools.netstat_shows_listener(LINUX_NETSTAT, 8080)
    assert not posix_tools.netstat_shows_listener(LINUX_NETSTAT, 5432)
    assert not posix_tools.netstat_shows_listener(LINUX_NETSTAT, 5353)


def test_netstat_shows_listener_on_macos():
    assert posix_tools.netstat_shows_listener(MACOS_NETSTAT, 5173)
    assert not posix_tools.netstat_shows_listener(MACOS_NETSTAT, 62000)
