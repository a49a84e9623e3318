"""Normalized in-memory cache.

Response data is flattened into records keyed by entity identity:

- objects carrying `__typename` and `id` are keyed `"<typename>:<id>"`;
- any other object is keyed by its path from the operation root
  (`"<root>.<field>.<index>"`);
- nested objects are replaced by `{"__ref": key}` references.

Writes merge by key (last write wins per field), so the same entity arriving
from two operations is stored once. There is no eviction.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Iterable, Mapping

REFERENCE_KEY = "__ref"

Record = dict[str, Any]


def entity_key(value: Mapping[str, Any], fallback: str) -> str:
    typename = value.get("__typename")
    identifier = value.get("id")
    if isinstance(typename, str) and typename and identifier is not None:
        return f"{typename}:{identifier}"
    return fallback


def normalize(root_key: str, data: Mapping[str, Any]) -> dict[str, Record]:
    """Flatten `data` into records, the root stored under `root_key`."""

    records: dict[str, Record] = {}

    def visit(value: Any, path_key: str) -> Any:
        if isinstance(value, Mapping):
            key = entity_key(value, path_key)
            fields = {name: visit(child, f"{key}.{name}") for name, child in value.items()}
            records.setdefault(key, {}).update(fields)
            return {REFERENCE_KEY: key}
        if isinstance(value, list):
            return [visit(item, f"{path_key}.{index}") for index, item in enumerate(value)]
        return value

    root_fields = {name: visit(child, f"{root_key}.{name}") for name, child in data.items()}
    records.setdefault(root_key, {}).update(root_fields)
    return records


def _is_reference(value: Any) -> bool:
    return isinstance(value, dict) and len(value) == 1 and REFERENCE_KEY in value


class CacheStore:
    """Process-wide record store, safe for concurrent read and merge."""

    def __init__(self) -> None:
        self._records: dict[str, Record] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._records)

    def record(self, key: str) -> Record | None:
        with self._lock:
            found = self._records.get(key)
            return copy.deepcopy(found) if found is not None else None

    def merge(self, records: Mapping[str, Mapping[str, Any]]) -> set[str]:
        """Merge records field by field; returns the keys whose fields changed."""

        changed: set[str] = set()
        with self._lock:
            for key, fields in records.items():
                current = self._records.setdefault(key, {})
                for name, value in fields.items():
                    if name not in current or current[name] != value:
                        current[name] = copy.deepcopy(value)
                        changed.add(key)
        return changed

    def load(self, root_key: str) -> dict[str, Any] | None:
        """Rebuild the data tree stored under `root_key`.

        Returns None when the root or any referenced record is missing.
        """

        with self._lock:
            root = self._records.get(root_key)
            if root is None:
                return None
            try:
                return self._resolve(root, stack=(root_key,))
            except KeyError:
                return None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def snapshot(self) -> dict[str, Record]:
        with self._lock:
            return copy.deepcopy(self._records)

    def _resolve(self, fields: Mapping[str, Any], *, stack: Iterable[str]) -> dict[str, Any]:
        return {name: self._resolve_value(value, stack=tuple(stack)) for name, value in fields.items()}

    def _resolve_value(self, value: Any, *, stack: tuple[str, ...]) -> Any:
        if _is_reference(value):
            key = value[REFERENCE_KEY]
            record = self._records[key]
            if key in stack:
                # Cycle between merged entities: keep only the scalar fields.
                return {
                    name: copy.deepcopy(v)
                    for name, v in record.items()
                    if not _is_reference(v) and not isinstance(v, list)
                }
            return self._resolve(record, stack=(*stack, key))
        if isinstance(value, list):
            return [self._resolve_value(item, stack=stack) for item in value]
        return copy.deepcopy(value)
