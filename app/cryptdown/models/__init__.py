"""Data models for cryptdown.

This module exports the teardown step and context data structures.
"""

from cryptdown.models.context import ContainerRef, MapperEntry, MountTree, TeardownContext
from cryptdown.models.step import StepExecutor, StepResult, StepStatus, TeardownStep

__all__ = [
    "ContainerRef",
    "MapperEntry",
    "MountTree",
    "StepExecutor",
    "StepResult",
    "StepStatus",
    "TeardownContext",
    "TeardownStep",
]
