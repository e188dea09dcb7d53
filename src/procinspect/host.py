"""Host-wide constants needed to interpret the process table."""

import functools
import os
from dataclasses import dataclass
from datetime import datetime

import psutil


@dataclass(slots=True, frozen=True)
class HostEnvironment:
    """
    Read-only facts about the running host.

    Passed explicitly to everything that converts ticks or pages so tests can
    use fixed synthetic values.
    """

    boot_time: float  # Seconds since the epoch
    ticks_per_second: int
    page_size: int  # Bytes

    def ticks_to_seconds(self, ticks: int) -> float:
        """Convert scheduler ticks to seconds."""
        return ticks / self.ticks_per_second

    def pages_to_bytes(self, pages: int) -> int:
        """Convert a page count to bytes."""
        return pages * self.page_size

    def start_time(self, start_ticks: int) -> datetime:
        """Wall-clock start time of a process that started start_ticks after boot."""
        return datetime.fromtimestamp(
            self.boot_time + self.ticks_to_seconds(start_ticks)
        ).astimezone()


@functools.lru_cache(maxsize=None)
def detect_host() -> HostEnvironment:
    """Detect the host environment once for the lifetime of the tool."""
    return HostEnvironment(
        boot_time=psutil.boot_time(),
        ticks_per_second=os.sysconf("SC_CLK_TCK"),
        page_size=os.sysconf("SC_PAGE_SIZE"),
    )
