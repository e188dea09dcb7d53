"""Exceptions raised by procinspect."""


class InspectionError(Exception):
    """Base class for fatal inspection failures."""

    def __init__(self, pid: int, message: str) -> None:
        super().__init__(f"pid {pid}: {message}")
        self.pid = pid


class ProcessNotFoundError(InspectionError):
    """No process exists at the pid, or its stat record is unreadable."""


class StatParseError(InspectionError):
    """The stat record is structurally invalid."""
