"""Data models for procinspect."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class HealthStatus(str, Enum):
    """Health labels derived from the stat record."""

    HEALTHY = "healthy"
    ZOMBIE = "zombie"
    STOPPED = "stopped"
    HIGH_CPU = "high-cpu"
    HIGH_MEM = "high-mem"


class ForkStatus(str, Enum):
    """
    Fork labels derived from the parent pid and comm.

    This is a coarse heuristic: it does not look at clone/fork flags.
    """

    UNKNOWN = "unknown"
    FORKED = "forked"
    NOT_FORKED = "not-forked"


@dataclass(slots=True, frozen=True)
class StatRecord:
    """Typed fields of /proc/<pid>/stat."""

    pid: int
    comm: str
    state: str  # 'R', 'S', 'Z', 'T', etc.
    ppid: int
    utime: int  # Ticks
    stime: int  # Ticks
    start_ticks: int  # Ticks since boot
    rss_pages: int

    @property
    def cpu_ticks(self) -> int:
        """Cumulative user + system CPU ticks."""
        return self.utime + self.stime


@dataclass(slots=True, frozen=True)
class SocketAddress:
    """Bind address and port of a socket."""

    address: str
    port: int


@dataclass(slots=True, frozen=True)
class GitContext:
    """Repository name and branch, both empty when no repository was found."""

    repo: str = ""
    branch: str = ""


@dataclass(slots=True, frozen=True)
class Process:
    """Immutable description of one inspected process."""

    pid: int
    ppid: int
    command: str
    cmdline: str
    started_at: datetime
    user: str
    working_dir: str
    git_repo: str
    git_branch: str
    container: str
    service: str
    ports: tuple[int, ...]
    addresses: tuple[str, ...]
    health: HealthStatus
    forked: ForkStatus
    env: tuple[str, ...]

    def __post_init__(self) -> None:
        if self.pid < 0 or self.ppid < 0:
            raise ValueError(f"pid and ppid must be non-negative: {self.pid}, {self.ppid}")
        if len(self.ports) != len(self.addresses):
            raise ValueError("ports and addresses must have the same length")

    @property
    def listeners(self) -> list[SocketAddress]:
        """Ports paired with their bind addresses."""
        return [
            SocketAddress(address=address, port=port)
            for port, address in zip(self.ports, self.addresses)
        ]
