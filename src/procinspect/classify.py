"""
Heuristic labels derived from process state.

Each classifier is an ordered list of (predicate, label) rules. Health rules
are all evaluated and the last match wins; cgroup rules stop at the first
match.
"""

from collections.abc import Callable

from procinspect.host import HostEnvironment
from procinspect.models import ForkStatus, HealthStatus, StatRecord

HIGH_CPU_SECONDS = 2 * 60 * 60
HIGH_MEM_MEGABYTES = 1024
MEGABYTE = 1024 * 1024

INIT_PID = 1
INIT_COMM = "systemd"

HealthRule = tuple[Callable[[StatRecord, HostEnvironment], bool], HealthStatus]


def cpu_seconds(stat: StatRecord, host: HostEnvironment) -> float:
    """Cumulative CPU time of the process in seconds."""
    return host.ticks_to_seconds(stat.cpu_ticks)


def rss_megabytes(stat: StatRecord, host: HostEnvironment) -> float:
    """Resident memory of the process in megabytes."""
    return host.pages_to_bytes(stat.rss_pages) / MEGABYTE


# Later rules override earlier ones, so resource labels win over
# zombie/stopped.
HEALTH_RULES: list[HealthRule] = [
    (lambda stat, host: stat.state == "Z", HealthStatus.ZOMBIE),
    (lambda stat, host: stat.state == "T", HealthStatus.STOPPED),
    (lambda stat, host: cpu_seconds(stat, host) > HIGH_CPU_SECONDS, HealthStatus.HIGH_CPU),
    (lambda stat, host: rss_megabytes(stat, host) > HIGH_MEM_MEGABYTES, HealthStatus.HIGH_MEM),
]

# First match wins.
CGROUP_MARKERS: list[tuple[str, str]] = [
    ("docker", "docker"),
    ("containerd", "containerd"),
    ("kubepods", "kubernetes"),
]


def classify_health(stat: StatRecord, host: HostEnvironment) -> HealthStatus:
    """Label a process healthy, zombie, stopped, high-cpu or high-mem."""
    health = HealthStatus.HEALTHY
    for predicate, label in HEALTH_RULES:
        if predicate(stat, host):
            health = label
    return health


def classify_fork(ppid: int, comm: str) -> ForkStatus:
    """
    Guess whether a process was forked from something other than init.

    Approximate: only the parent pid and comm are considered.
    """
    if ppid == INIT_PID or comm == INIT_COMM:
        return ForkStatus.NOT_FORKED
    return ForkStatus.FORKED


def classify_cgroup(cgroup_text: str) -> str:
    """Return the container runtime named in the cgroup text, or ''."""
    for marker, label in CGROUP_MARKERS:
        if marker in cgroup_text:
            return label
    return ""
