"""
Host helpers: privilege check and listening-port probe.
"""

from __future__ import annotations

import logging
import os
import socket

from marznodectl.adapters.registry import AdapterRegistry
from marznodectl.core.errors import ExternalToolFailure, PrivilegeError, UserInputError
from marznodectl.core.terminal import Terminal

logger = logging.getLogger(__name__)


def is_root() -> bool:
    return os.geteuid() == 0


def require_root() -> None:
    """Raise ``PrivilegeError`` unless running as root."""
    if not is_root():
        raise PrivilegeError()


def parse_listening_ports(ss_output: str) -> set[int]:
    """Local ports from ``ss -tuln`` output.

    The local address is the fifth column (``0.0.0.0:5566``,
    ``[::]:443``, ``*:53``); the header line is skipped.
    """
    ports: set[int] = set()
    for line in ss_output.splitlines():
        parts = line.split()
        if len(parts) < 5 or parts[0] == "Netid":
            continue
        _, _, port = parts[4].rpartition(":")
        if port.isdigit():
            ports.add(int(port))
    return ports


def listening_ports(registry: AdapterRegistry) -> set[int]:
    """Ports currently bound on this host (TCP and UDP)."""
    receipt = registry.run("shell", "host.ports", argv=["ss", "-tuln"], timeout=10)
    if receipt.failed:
        raise ExternalToolFailure.from_receipt(receipt, "Listing listening ports")
    return parse_listening_ports(receipt.output)


def can_bind(port: int) -> bool:
    """Whether ``port`` can be bound for both TCP and UDP on all interfaces."""
    for kind in (socket.SOCK_STREAM, socket.SOCK_DGRAM):
        with socket.socket(socket.AF_INET, kind) as sock:
            try:
                sock.bind(("", port))
            except OSError:
                return False
    return True


def is_port_in_use(registry: AdapterRegistry, port: int) -> bool:
    """Check ``port`` against ``ss -tuln``; without ``ss``, try to bind it."""
    try:
        return port in listening_ports(registry)
    except ExternalToolFailure as e:
        logger.warning("%s; checking port %d by binding it", e, port)
        return not can_bind(port)


def prompt_port(
    registry: AdapterRegistry,
    terminal: Terminal,
    default: int,
) -> int:
    """Ask for the service port until a free, valid one is given.

    Empty input accepts ``default``. A port outside 1-65535, a
    non-number, or a port already bound on this host is rejected.
    """
    while True:
        raw = terminal.prompt(f"Enter the service port (default: {default})", default=str(default))
        try:
            port = validate_port(raw)
        except UserInputError as e:
            terminal.warn(str(e))
            continue
        if is_port_in_use(registry, port):
            terminal.warn(f"Port {port} is already in use. Please choose a different port.")
            continue
        return port


def validate_port(raw: str | int) -> int:
    """Parse ``raw`` as a TCP/UDP port number."""
    try:
        port = int(raw)
    except (TypeError, ValueError):
        raise UserInputError(f"Invalid port: {raw!r}") from None
    if not 1 <= port <= 65535:
        raise UserInputError(f"Port must be between 1 and 65535, got {port}")
    return port
