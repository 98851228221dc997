"""Persistent stores."""

from .context_cache import ContextCache, get_cached_result, save_to_cache

__all__ = ["ContextCache", "get_cached_result", "save_to_cache"]
