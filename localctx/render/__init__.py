"""Markdown rendering for context bundles."""

from .markdown import MarkdownBuilder

__all__ = ["MarkdownBuilder"]
