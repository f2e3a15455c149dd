"""Platform helpers (process execution)."""

from .process import ProcessError, ProcessOutput, capture, run

__all__ = ["ProcessError", "ProcessOutput", "capture", "run"]
