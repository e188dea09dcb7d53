"""
/proc filesystem readers for a single process.

Only the stat record is mandatory: read_stat raises on failure. Every other
reader returns a documented default when its file cannot be read.
"""

import logging
import os
from pathlib import Path

import psutil

from procinspect.errors import ProcessNotFoundError, StatParseError
from procinspect.models import StatRecord

logger = logging.getLogger(__name__)

PROC_ROOT = Path("/proc")
UNKNOWN = "unknown"

# Offsets into the fields following the closing parenthesis of comm.
# Field n of the full record (1-based) sits at offset n - 3.
_STATE = 0
_PPID = 1
_UTIME = 11
_STIME = 12
_START_TICKS = 19
_RSS_PAGES = 21


def parse_stat(raw: str, pid: int) -> StatRecord:
    """
    Parse the text of /proc/<pid>/stat.

    comm is enclosed in parentheses and may itself contain spaces and
    parentheses, so it spans from the first '(' to the last ')'.

    Args:
        raw: Contents of the stat file.
        pid: Process ID the record was read for (used in error messages).

    Returns:
        The parsed StatRecord.

    Raises:
        StatParseError: If the record has no parenthesis pair, too few fields,
            or non-numeric numeric fields.
    """
    open_idx = raw.find("(")
    close_idx = raw.rfind(")")
    if open_idx == -1 or close_idx == -1 or close_idx < open_idx:
        raise StatParseError(pid, "invalid stat format: no comm parentheses")

    comm = raw[open_idx + 1 : close_idx]
    fields = raw[close_idx + 1 :].split()
    if len(fields) <= _RSS_PAGES:
        raise StatParseError(pid, f"invalid stat format: {len(fields)} fields after comm")

    try:
        return StatRecord(
            pid=pid,
            comm=comm,
            state=fields[_STATE],
            ppid=int(fields[_PPID]),
            utime=int(fields[_UTIME]),
            stime=int(fields[_STIME]),
            start_ticks=int(fields[_START_TICKS]),
            rss_pages=int(fields[_RSS_PAGES]),
        )
    except ValueError as exc:
        raise StatParseError(pid, f"invalid stat format: {exc}") from exc


def read_stat(pid: int, proc_root: Path = PROC_ROOT) -> StatRecord:
    """
    Read and parse /proc/<pid>/stat.

    Raises:
        ProcessNotFoundError: If the stat file cannot be read.
        StatParseError: If its contents are malformed.
    """
    stat_file = proc_root / str(pid) / "stat"
    try:
        raw = stat_file.read_bytes().decode("utf-8", errors="replace")
    except OSError as exc:
        raise ProcessNotFoundError(pid, f"cannot read {stat_file}: {exc}") from exc
    return parse_stat(raw, pid)


def _read_nul_separated(path: Path) -> list[str]:
    """Split a NUL-separated /proc file into its non-empty entries."""
    data = path.read_bytes().decode("utf-8", errors="replace")
    return [entry for entry in data.split("\0") if entry]


def read_environment(pid: int, proc_root: Path = PROC_ROOT) -> list[str]:
    """Return the KEY=value entries of /proc/<pid>/environ, or [] if unreadable."""
    try:
        return _read_nul_separated(proc_root / str(pid) / "environ")
    except OSError as exc:
        logger.debug("environment of pid %d unreadable: %s", pid, exc)
        return []


def read_cmdline(pid: int, proc_root: Path = PROC_ROOT) -> str:
    """Return the full command line with arguments joined by spaces, or ''."""
    try:
        data = (proc_root / str(pid) / "cmdline").read_bytes()
    except OSError as exc:
        logger.debug("cmdline of pid %d unreadable: %s", pid, exc)
        return ""
    return data.decode("utf-8", errors="replace").replace("\0", " ").strip()


def read_working_directory(pid: int, proc_root: Path = PROC_ROOT) -> str:
    """Resolve the cwd link of a process, or return 'unknown'."""
    try:
        return os.readlink(proc_root / str(pid) / "cwd")
    except OSError as exc:
        logger.debug("cwd of pid %d unreadable: %s", pid, exc)
        return UNKNOWN


def read_cgroup(pid: int, proc_root: Path = PROC_ROOT) -> str:
    """Return the raw cgroup membership text, or '' if unreadable."""
    try:
        return (proc_root / str(pid) / "cgroup").read_text(errors="replace")
    except OSError as exc:
        logger.debug("cgroup of pid %d unreadable: %s", pid, exc)
        return ""


def read_user(pid: int, proc_root: Path = PROC_ROOT) -> str:
    """
    Resolve the name of the user owning a process, or 'unknown'.

    The lookup goes through psutil, which only reads psutil.PROCFS_PATH;
    any other proc_root yields 'unknown' rather than the owner of an
    unrelated live process.
    """
    if proc_root != Path(psutil.PROCFS_PATH):
        logger.debug("owner of pid %d not resolved outside %s", pid, psutil.PROCFS_PATH)
        return UNKNOWN
    try:
        return psutil.Process(pid).username()
    except psutil.Error as exc:
        logger.debug("owner of pid %d unresolved: %s", pid, exc)
        return UNKNOWN
