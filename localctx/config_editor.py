"""Get/set/delete/add/remove editing of localctx.yml via dot-separated keys."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .config import ConfigError, read_config_data
from .logging import get_logger

logger = get_logger("config_editor")

OPERATIONS = ("get", "set", "delete", "add", "remove")

_MISSING = object()


class ConfigEditor:
    """Edits a YAML config file in place.

    Keys are dot separated (``cache.dir``); numeric segments index into lists.
    Mutating operations persist immediately with ``yaml.safe_dump``.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Dict[str, Any]:
        return read_config_data(self.path)

    def get(self, key: Optional[str] = None) -> Any:
        data = self.load()
        if not key:
            return data
        value = _lookup(data, _split(key))
        return None if value is _MISSING else value

    def set(self, key: str, value: Any) -> Dict[str, Any]:
        data = self.load()
        parts = _split(_require_key(key, "set"))
        container = data
        for part in parts[:-1]:
            child = _child(container, part)
            if not isinstance(child, (dict, list)):
                child = {}
                _assign(container, part, child)
            container = child
        _assign(container, parts[-1], value)
        self._save(data)
        return data

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns ``False`` when it was not present."""
        data = self.load()
        parts = _split(_require_key(key, "delete"))
        parent, last = _parent_of(data, parts)
        if parent is None:
            return False
        if isinstance(parent, dict):
            if last not in parent:
                return False
            del parent[last]
        else:
            index = _index(parent, last)
            if index is None:
                return False
            del parent[index]
        self._save(data)
        return True

    def add(self, key: str, item: Any) -> Dict[str, Any]:
        data = self.load()
        parts = _split(_require_key(key, "add"))
        container: Any = data
        for position, part in enumerate(parts):
            if not isinstance(container, (dict, list)):
                raise ConfigError(f'Cannot access key "{key}"')
            child = _child(container, part)
            if child is _MISSING:
                if isinstance(container, list):
                    raise ConfigError(f'Cannot access key "{key}"')
                child = [] if position == len(parts) - 1 else {}
                container[part] = child
            container = child
        if not isinstance(container, list):
            raise ConfigError(f'Key "{key}" is not a list')
        container.append(item)
        self._save(data)
        return data

    def remove(self, key: str, item: Any) -> bool:
        """Remove the first occurrence of ``item``; ``False`` when absent."""
        data = self.load()
        target = _lookup(data, _split(_require_key(key, "remove")))
        if target is _MISSING:
            raise ConfigError(f'Key "{key}" not found')
        if not isinstance(target, list):
            raise ConfigError(f'Key "{key}" is not a list')
        if item not in target:
            return False
        target.remove(item)
        self._save(data)
        return True

    def apply(
        self,
        operation: str,
        key: Optional[str] = None,
        value: Any = None,
        array_item: Any = None,
    ) -> str:
        """Run ``operation`` and return the user-facing result text."""
        if operation == "get":
            return _dump(self.get(key))
        if operation == "set":
            data = self.set(key or "", value)
            return f"Configuration updated successfully. New config:\n{_dump(data)}"
        if operation == "delete":
            if not self.delete(key or ""):
                return f'Key "{key}" not found'
            return f"Configuration updated successfully. New config:\n{_dump(self.load())}"
        item = array_item if array_item is not None else value
        if operation == "add":
            data = self.add(key or "", item)
            return f"Configuration updated successfully. New config:\n{_dump(data)}"
        if operation == "remove":
            if not self.remove(key or "", item):
                return f'Item not found in list at "{key}"'
            return f"Configuration updated successfully. New config:\n{_dump(self.load())}"
        raise ConfigError(f"Unknown operation: {operation}")

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump(data, sort_keys=False, default_flow_style=False),
            encoding="utf-8",
        )
        logger.debug("Wrote configuration to %s", self.path)


def parse_value(raw: Optional[str]) -> Any:
    """Interpret a command-line value as a YAML scalar or collection."""
    if raw is None:
        return None
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def _dump(value: Any) -> str:
    return yaml.safe_dump(value, sort_keys=False, default_flow_style=False).strip()


def _require_key(key: Optional[str], operation: str) -> str:
    if not key:
        raise ConfigError(f"Key is required for {operation} operation")
    return key


def _split(key: str) -> List[str]:
    parts = key.split(".")
    if any(not part for part in parts):
        raise ConfigError(f'Invalid key "{key}"')
    return parts


def _index(container: List[Any], part: str) -> Optional[int]:
    try:
        index = int(part)
    except ValueError:
        return None
    if -len(container) <= index < len(container):
        return index
    return None


def _child(container: Any, part: str) -> Any:
    if isinstance(container, dict):
        return container.get(part, _MISSING)
    if isinstance(container, list):
        index = _index(container, part)
        return _MISSING if index is None else container[index]
    return _MISSING


def _assign(container: Any, part: str, value: Any) -> None:
    if isinstance(container, dict):
        container[part] = value
        return
    index = _index(container, part)
    if index is None:
        raise ConfigError(f'List index "{part}" is out of range')
    container[index] = value


def _lookup(data: Any, parts: List[str]) -> Any:
    current = data
    for part in parts:
        current = _child(current, part)
        if current is _MISSING:
            return _MISSING
    return current


def _parent_of(data: Dict[str, Any], parts: List[str]) -> Tuple[Any, str]:
    parent = _lookup(data, parts[:-1]) if len(parts) > 1 else data
    if parent is _MISSING or not isinstance(parent, (dict, list)):
        return None, parts[-1]
    return parent, parts[-1]


__all__ = ["OPERATIONS", "ConfigEditor", "parse_value"]
