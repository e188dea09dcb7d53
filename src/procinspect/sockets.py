"""
Socket correlation for a process.

The socket table maps inode -> bind address; the lister yields the socket
inodes a process holds open. Both are replaceable callables.
"""

import ipaddress
import logging
import os
from collections.abc import Callable
from pathlib import Path

from procinspect.models import SocketAddress
from procinspect.procfs import PROC_ROOT

logger = logging.getLogger(__name__)

SocketTable = dict[int, SocketAddress]
SocketTableReader = Callable[[], SocketTable]
SocketLister = Callable[[int], list[int]]

TCP_LISTEN = "0A"
UDP_UNCONNECTED = "07"

# File under <proc_root>/net -> socket state that counts as bound.
NET_TABLES = {
    "tcp": TCP_LISTEN,
    "tcp6": TCP_LISTEN,
    "udp": UDP_UNCONNECTED,
    "udp6": UDP_UNCONNECTED,
}

SOCKET_LINK_PREFIX = "socket:["


def decode_address(hex_addr: str) -> str:
    """
    Decode a hex address from /proc/net/*.

    Addresses are stored as 32-bit words in host (little-endian) order:
    '0100007F' is 127.0.0.1.
    """
    raw = bytes.fromhex(hex_addr)
    if len(raw) not in (4, 16):
        raise ValueError(f"unexpected address length: {hex_addr}")
    swapped = b"".join(raw[i : i + 4][::-1] for i in range(0, len(raw), 4))
    return str(ipaddress.ip_address(swapped))


def parse_net_line(line: str, bound_state: str) -> tuple[int, SocketAddress] | None:
    """
    Parse one row of /proc/net/tcp-style output.

    Returns:
        (inode, SocketAddress) for a socket in bound_state, otherwise None.
    """
    parts = line.split()
    if len(parts) < 10 or parts[3] != bound_state:
        return None
    try:
        addr_hex, port_hex = parts[1].split(":")
        return int(parts[9]), SocketAddress(
            address=decode_address(addr_hex),
            port=int(port_hex, 16),
        )
    except ValueError:
        return None


def read_socket_table(proc_root: Path = PROC_ROOT) -> SocketTable:
    """Read the listening TCP and bound UDP sockets of the host."""
    table: SocketTable = {}
    for name, bound_state in NET_TABLES.items():
        path = proc_root / "net" / name
        try:
            lines = path.read_text().splitlines()[1:]  # Skip header
        except OSError as exc:
            logger.debug("cannot read %s: %s", path, exc)
            continue
        for line in lines:
            entry = parse_net_line(line, bound_state)
            if entry is not None:
                inode, address = entry
                table[inode] = address
    return table


def list_socket_inodes(pid: int, proc_root: Path = PROC_ROOT) -> list[int]:
    """Return the socket inodes open by pid in ascending fd order."""
    fd_dir = proc_root / str(pid) / "fd"
    try:
        fds = sorted((name for name in os.listdir(fd_dir) if name.isdigit()), key=int)
    except OSError as exc:
        logger.debug("cannot list %s: %s", fd_dir, exc)
        return []

    inodes: dict[int, None] = {}
    for fd in fds:
        try:
            target = os.readlink(fd_dir / fd)
        except OSError:
            continue  # fd closed since listing
        if not target.startswith(SOCKET_LINK_PREFIX) or not target.endswith("]"):
            continue
        inode_text = target[len(SOCKET_LINK_PREFIX) : -1]
        if inode_text.isdigit():
            inodes.setdefault(int(inode_text))
    return list(inodes)


def correlate_sockets(
    pid: int,
    table_reader: SocketTableReader,
    lister: SocketLister,
) -> tuple[tuple[int, ...], tuple[str, ...]]:
    """
    Pair the sockets open by pid with their bind addresses.

    Sockets missing from the table (other address families, connected
    sockets) are skipped. A reader or lister that fails counts as empty.

    Returns:
        (ports, addresses), positionally paired.
    """
    try:
        table = table_reader()
        inodes = lister(pid)
    except Exception as exc:
        logger.debug("sockets of pid %d unavailable: %s", pid, exc)
        return (), ()

    ports: list[int] = []
    addresses: list[str] = []
    for inode in inodes:
        entry = table.get(inode)
        if entry is None:
            continue
        ports.append(entry.port)
        addresses.append(entry.address)
    return tuple(ports), tuple(addresses)
