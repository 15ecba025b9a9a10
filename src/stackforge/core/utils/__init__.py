"""Shared utilities for stackforge."""
from __future__ import annotations

from .io import iter_yaml_files, read_yaml
from .merge import deep_merge, merge_arrays, unique_in_order

__all__ = [
    "deep_merge",
    "merge_arrays",
    "unique_in_order",
    "read_yaml",
    "iter_yaml_files",
]
