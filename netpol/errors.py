"""
Exceptions raised at the input boundary.

The validator, compiler and renderer return data and never raise; only
loading a snapshot document can fail.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SnapshotProblem(BaseModel):
    """Problem in a snapshot document with JSON pointer path."""
    path: str = Field(description="JSON pointer path to the problem")
    message: str = Field(description="Human-readable error message")


class NetpolError(Exception):
    """Base exception for netpol."""


class SnapshotError(NetpolError):
    """Raised when a snapshot document cannot be read or parsed."""

    def __init__(self, message: str, problems: Optional[List[SnapshotProblem]] = None):
        self.message = message
        self.problems = problems or []
        super().__init__(message)
