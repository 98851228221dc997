"""On-disk cache of rendered context bundles keyed by request and file mtimes."""

from __future__ import annotations

from datetime import UTC, datetime
import hashlib
import json
import os
from pathlib import Path
import re
import tempfile
from typing import Dict, Optional, Sequence

from ..logging import get_logger
from ..models import CacheRequest

logger = get_logger("stores.context_cache")

_CACHE_VERSION = 1
_MISSING_MTIME = 0
_KEY_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def file_modification_times(file_paths: Sequence[str]) -> Dict[str, int]:
    """Return ``{path: mtime_ns}``; files that no longer exist map to ``0``."""
    times: Dict[str, int] = {}
    for file_path in file_paths:
        try:
            times[file_path] = os.stat(file_path).st_mtime_ns
        except OSError:
            times[file_path] = _MISSING_MTIME
    return times


def fingerprint(
    request: CacheRequest, file_paths: Sequence[str], mtimes: Dict[str, int]
) -> str:
    payload = {
        "request": request.descriptor(),
        "files": sorted(set(file_paths)),
        "mtimes": {path: mtimes.get(path, _MISSING_MTIME) for path in sorted(mtimes)},
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def cache_key(request: CacheRequest, file_paths: Sequence[str], mtimes: Dict[str, int]) -> str:
    name = Path(request.target_directory).name or "unknown"
    return f"{_KEY_UNSAFE.sub('_', name)}_{fingerprint(request, file_paths, mtimes)}.md"


class ContextCache:
    """Stores markdown payloads with a metadata sidecar recording file mtimes."""

    def __init__(self, cache_dir: str | Path) -> None:
        self._cache_dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def lookup(self, request: CacheRequest, file_paths: Sequence[str]) -> Optional[str]:
        """Return the cached payload, or ``None`` on any kind of miss."""
        mtimes = file_modification_times(file_paths)
        key = cache_key(request, file_paths, mtimes)
        payload_path = self._cache_dir / key
        meta_path = self._cache_dir / f"{key}.meta.json"
        try:
            metadata = json.loads(meta_path.read_text(encoding="utf-8"))
            if not self._is_fresh(metadata, mtimes):
                logger.debug("Cache entry %s is stale", key)
                return None
            content = payload_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.debug("Treating cache entry %s as a miss: %s", key, exc)
            return None
        logger.debug("Cache hit for %s", key)
        return content

    def store(
        self, request: CacheRequest, file_paths: Sequence[str], content: str
    ) -> Path:
        """Persist ``content``; the payload lands before its metadata."""
        mtimes = file_modification_times(file_paths)
        key = cache_key(request, file_paths, mtimes)
        metadata = {
            "version": _CACHE_VERSION,
            "request": request.descriptor(),
            "generated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "file_modification_times": mtimes,
        }
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        payload_path = self._cache_dir / key
        self._write_atomic(payload_path, content)
        self._write_atomic(
            self._cache_dir / f"{key}.meta.json",
            json.dumps(metadata, indent=2, sort_keys=True),
        )
        return payload_path

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _is_fresh(metadata: object, mtimes: Dict[str, int]) -> bool:
        if not isinstance(metadata, dict) or metadata.get("version") != _CACHE_VERSION:
            return False
        recorded = metadata.get("file_modification_times")
        if not isinstance(recorded, dict):
            return False
        for path, recorded_mtime in recorded.items():
            if mtimes.get(path, _MISSING_MTIME) != recorded_mtime:
                return False
        return True

    def _write_atomic(self, target: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._cache_dir, prefix=".tmp-", suffix=target.suffix)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def get_cached_result(
    cache_dir: str | Path, request: CacheRequest, file_paths: Sequence[str]
) -> Optional[str]:
    return ContextCache(cache_dir).lookup(request, file_paths)


def save_to_cache(
    cache_dir: str | Path,
    request: CacheRequest,
    file_paths: Sequence[str],
    content: str,
) -> None:
    """Store ``content``; failures are logged rather than raised."""
    try:
        ContextCache(cache_dir).store(request, file_paths, content)
    except OSError as exc:
        logger.warning("Could not write cache entry in %s: %s", cache_dir, exc)


__all__ = [
    "ContextCache",
    "cache_key",
    "file_modification_times",
    "fingerprint",
    "get_cached_result",
    "save_to_cache",
]
