"""procinspect - explain where a running process came from and what it is doing."""

from procinspect.errors import InspectionError, ProcessNotFoundError, StatParseError
from procinspect.inspector import ProcessInspector, read_process
from procinspect.models import ForkStatus, HealthStatus, Process

__version__ = "0.1.0"

__all__ = [
    "ForkStatus",
    "HealthStatus",
    "InspectionError",
    "Process",
    "ProcessInspector",
    "ProcessNotFoundError",
    "StatParseError",
    "read_process",
]
