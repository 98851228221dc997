"""Heuristic code-structure extraction."""

from .docs import collect_documentation
from .scanner import MAX_SIGNATURE_LINES, SignatureSpan, find_complete_signature
from .structure import extract_structure, extract_structure_from_text

__all__ = [
    "MAX_SIGNATURE_LINES",
    "SignatureSpan",
    "collect_documentation",
    "extract_structure",
    "extract_structure_from_text",
    "find_complete_signature",
]
