"""Core data models shared across localctx components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class MethodInfo:
    """A method, constructor or accessor declared inside a class body."""

    name: str
    signature: str
    documentation: Optional[str] = None


@dataclass(frozen=True)
class FunctionInfo:
    """A top-level function declaration."""

    name: str
    signature: str
    documentation: Optional[str] = None


@dataclass(frozen=True)
class ClassInfo:
    """A class-like declaration (class, mixin, enum, extension, ...)."""

    name: str
    signature: str
    documentation: Optional[str] = None
    methods: Tuple[MethodInfo, ...] = ()


@dataclass(frozen=True)
class ExtractedStructure:
    """Structure record for a single source file."""

    file_path: str
    classes: Tuple[ClassInfo, ...] = ()
    functions: Tuple[FunctionInfo, ...] = ()

    @classmethod
    def empty(cls, file_path: str) -> "ExtractedStructure":
        return cls(file_path=file_path)

    @property
    def is_empty(self) -> bool:
        return not self.classes and not self.functions


@dataclass(frozen=True)
class FileReference:
    """A file discovered while walking the import graph."""

    file: str
    imports: Tuple[str, ...] = ()
    depth: int = 0


@dataclass
class FetchRequest:
    """Inputs for a fetch-context run."""

    search_terms: List[str]
    globs: List[str] = field(default_factory=list)
    regex: List[str] = field(default_factory=list)
    reference_depth: Optional[int] = None


@dataclass
class CacheRequest:
    """Request descriptor that participates in the cache fingerprint."""

    target_directory: str
    globs: List[str] = field(default_factory=list)
    regex: List[str] = field(default_factory=list)
    reference_depth: Optional[int] = None

    def descriptor(self) -> Dict[str, object]:
        return {
            "target_directory": self.target_directory,
            "globs": sorted(self.globs),
            "regex": sorted(self.regex),
            "reference_depth": -1 if self.reference_depth is None else self.reference_depth,
        }
