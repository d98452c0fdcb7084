"""
Tests for the privilege check and the port probe.
"""

import socket
from unittest.mock import patch

import pytest

from marznodectl.core.errors import PrivilegeError, UserInputError
from marznodectl.core.services.host import (
    can_bind,
    is_port_in_use,
    parse_listening_ports,
    prompt_port,
    require_root,
    validate_port,
)
from marznodectl.core.terminal import ScriptedTerminal

SS_OUTPUT = """\
Netid State  Recv-Q Send-Q Local Address:Port  Peer Address:Port Process
udp   UNCONN 0      0          127.0.0.53%lo:53         0.0.0.0:*
tcp   LISTEN 0      4096         0.0.0.0:5566       0.0.0.0:*
tcp   LISTEN 0      128          0.0.0.0:22         0.0.0.0:*
tcp   LISTEN 0      511             [::]:443           [::]:*
tcp   LISTEN 0      511                *:8080             *:*
"""


class TestPrivilege:
    def test_root(self, as_root):
        require_root()

    def test_not_root(self, as_user):
        with pytest.raises(PrivilegeError, match="must be run as root"):
            require_root()


class TestParseListeningPorts:
    def test_ports(self):
        assert parse_listening_ports(SS_OUTPUT) == {53, 5566, 22, 443, 8080}

    def test_empty(self):
        assert parse_listening_ports("") == set()

    def test_header_only(self):
        assert parse_listening_ports(SS_OUTPUT.splitlines()[0]) == set()


class TestValidatePort:
    def test_valid(self):
        assert validate_port("5566") == 5566
        assert validate_port(65535) == 65535

    @pytest.mark.parametrize("raw", ["0", "65536", "-1", "abc", ""])
    def test_invalid(self, raw):
        with pytest.raises(UserInputError):
            validate_port(raw)


class TestPromptPort:
    @pytest.fixture(autouse=True)
    def _ss(self, mock_adapter):
        mock_adapter.set_output("host.ports", SS_OUTPUT)

    def test_in_use(self, registry):
        assert is_port_in_use(registry, 22)
        assert not is_port_in_use(registry, 6000)

    def test_enter_accepts_default(self, registry):
        terminal = ScriptedTerminal(answers=[""])
        assert prompt_port(registry, terminal, 6000) == 6000

    def test_bound_port_rejected(self, registry):
        terminal = ScriptedTerminal(answers=["", "6001"])
        assert prompt_port(registry, terminal, 5566) == 6001
        assert terminal.texts("warn") == [
            "Port 5566 is already in use. Please choose a different port."
        ]

    def test_invalid_port_rejected(self, registry):
        terminal = ScriptedTerminal(answers=["70000", "ssh", "7000"])
        assert prompt_port(registry, terminal, 5566) == 7000
        assert len(terminal.texts("warn")) == 2

    def test_without_ss_free_port_accepted(self, registry, mock_adapter):
        mock_adapter.set_failure("host.ports", error="ss not found on this host")
        with patch("marznodectl.core.services.host.can_bind", return_value=True) as bind:
            assert prompt_port(registry, ScriptedTerminal(answers=[""]), 5566) == 5566
        bind.assert_called_once_with(5566)

    def test_without_ss_bound_port_rejected(self, registry, mock_adapter):
        mock_adapter.set_failure("host.ports", error="ss not found on this host")
        terminal = ScriptedTerminal(answers=["", "7000"])
        with patch("marznodectl.core.services.host.can_bind", side_effect=lambda p: p != 5566):
            assert prompt_port(registry, terminal, 5566) == 7000
        assert terminal.texts("warn") == [
            "Port 5566 is already in use. Please choose a different port."
        ]


class TestCanBind:
    def test_bound_tcp_port(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("", 0))
            sock.listen()
            port = sock.getsockname()[1]
            assert not can_bind(port)

    def test_released_port(self):
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("", 0))
            port = sock.getsockname()[1]
        assert can_bind(port)
