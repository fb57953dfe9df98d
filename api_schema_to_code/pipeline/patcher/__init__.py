"""
Patcher module.

Post-emission type overrides and atomic output writing.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .patch_engine import PatchEngine

__all__ = [
    "AtomicWriter",
    "PatchEngine",
]
