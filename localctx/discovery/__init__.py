"""File discovery and reference tracking."""

from .matcher import InvalidBasePathError, find_matching_files
from .references import ReferenceTracker, find_referencing_files, referencing_paths

__all__ = [
    "InvalidBasePathError",
    "ReferenceTracker",
    "find_matching_files",
    "find_referencing_files",
    "referencing_paths",
]
