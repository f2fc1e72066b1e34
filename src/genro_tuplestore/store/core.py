# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""CoreTupleStore - The in-memory hierarchical container.

This module provides CoreTupleStore, the base TupleStore implementation: a
tree of plain Python values addressed by dotted paths. Every other store in
the package wraps one of these.

Data Model:
    - **Maps**: dict nodes, children addressed by key
    - **Sequences**: list nodes, children addressed by numeric segments
      ('users.0.name'). Writing at index len(list) appends; any other
      index past the end turns the list into the equivalent map first
    - **Scalars**: anything else, stored and returned as-is

    The root is always a dict and starts empty. Map keys are path segments:
    stored dicts must have str keys without '.', otherwise set() and
    import_data() raise.

Isolation:
    The store owns its tree. get(), get_branch() and export_data() return
    deep copies of containers, and set()/import_data() store deep copies of
    the containers they are given, so no reference held by a caller ever
    aliases the stored tree.

Example:
    Basic usage::

        store = CoreTupleStore()
        store.set('user.profile.address.city', 'New York')

        store.get('user.profile.address')  # {'city': 'New York'}
        store.has('user.profile.phone')    # False
        store.find('user.profile.*')       # ['user.profile.address']
"""

from __future__ import annotations

import copy
from typing import Any

from ..base import TupleStore
from ..paths import MISSING, PathLike, normalize_path
from ..pattern import child_of, find_paths, list_index


class CoreTupleStore(TupleStore):
    """A plain in-memory TupleStore.

    CoreTupleStore provides:
    - set(path, value): Create/update values, materializing intermediate maps
    - get(path, default) / store[path]: Get values
    - get_branch(path) / export_data(path): Deep copies of subtrees
    - find(pattern): Wildcard path discovery

    Mutating methods accept and ignore the journal/silent/transaction/...
    keyword options understood by the layers that wrap this store.

    Example:
        >>> store = CoreTupleStore()
        >>> store.set('config.database.host', 'localhost')
        True
        >>> store['config.database.host']
        'localhost'
    """

    __slots__ = ('_data',)

    def __init__(self, source: dict[str, Any] | None = None) -> None:
        """Initialize a CoreTupleStore.

        Args:
            source: Optional initial data, deep-copied into the store.
        """
        self._data: dict[str, Any] = {}
        if source is not None:
            self.import_data(source)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing top-level keys."""
        return f"CoreTupleStore({list(self._data.keys())})"

    def __len__(self) -> int:
        """Return the number of top-level keys."""
        return len(self._data)

    # ==================== Path Utilities ====================

    def _resolve(self, parts: list[str]) -> Any:
        """Return the live node at parts, or MISSING.

        Traversal stops at the first segment that is absent or that tries to
        descend into a scalar.
        """
        current: Any = self._data
        for part in parts:
            current = child_of(current, part, MISSING)
            if current is MISSING:
                return MISSING
        return current

    def _htraverse(self, parts: list[str]) -> Any:
        """Walk to the parent of the last segment, creating maps as needed.

        Any intermediate segment that is missing, or holds something that is
        not a dict or list, is replaced by a new empty dict. A list about to be
        addressed with a segment that is neither an existing index nor
        len(list) is turned into the equivalent map ({'0': ..., '1': ...}) so
        the new key has somewhere to go.

        Args:
            parts: Non-empty list of segments.

        Returns:
            The container (dict or list) that should receive the last segment.
        """
        current: Any = self._data
        for i, part in enumerate(parts[:-1]):
            child = child_of(current, part, MISSING)
            if isinstance(child, list) and not _fits(child, parts[i + 1]):
                child = {str(index): item for index, item in enumerate(child)}
                _assign(current, part, child)
            elif not isinstance(child, (dict, list)):
                child = {}
                _assign(current, part, child)
            current = child
        return current

    # ==================== Core API ====================

    def set(self, path: PathLike, value: Any, **options: Any) -> bool:
        """Set a value at the given path, creating intermediate maps as needed.

        Args:
            path: Dotted path or segment sequence. The root path replaces
                the whole tree, like import_data(value, reset=False).
            value: The value to store. Containers are deep-copied.

        Returns:
            True.

        Raises:
            TypeError: If path is the root and value is not a dict, or value
                holds a dict with a non-str key.
            ValueError: If a path segment or a dict key contains '.'.
        """
        parts = normalize_path(path)
        if not parts:
            self._replace_root(value)
            return True

        for part in parts:
            _check_key(part)
        stored = _stored(value)
        parent = self._htraverse(parts)
        _assign(parent, parts[-1], stored)
        return True

    def get(self, path: PathLike, default: Any = None) -> Any:
        """Get the value at the given path.

        Args:
            path: Dotted path or segment sequence.
            default: Value returned when the path does not exist.

        Returns:
            The value (containers are deep-copied), or default.
        """
        node = self._resolve(normalize_path(path))
        if node is MISSING:
            return default
        return _detached(node)

    def get_branch(self, path: PathLike = None) -> Any:
        """Get a deep copy of the subtree at path.

        Args:
            path: Root of the branch. None or '' for the whole tree.

        Returns:
            Deep copy of the subtree, or {} if the path does not exist.
        """
        parts = normalize_path(path)
        if not parts:
            return copy.deepcopy(self._data)
        node = self._resolve(parts)
        if node is MISSING:
            return {}
        return _detached(node)

    def has(self, path: PathLike) -> bool:
        """Check whether every segment of the path resolves.

        A key stored with value None still exists.
        """
        return self._resolve(normalize_path(path)) is not MISSING

    def delete(self, path: PathLike, **options: Any) -> bool:
        """Delete the value at path, with its whole subtree.

        Args:
            path: Dotted path or segment sequence.

        Returns:
            True if the key existed and was removed. False for the root path,
            when the parent does not resolve to a container, or when the key
            was not there.
        """
        parts = normalize_path(path)
        if not parts:
            return False

        parent = self._resolve(parts[:-1])
        label = parts[-1]
        if isinstance(parent, dict):
            if label not in parent:
                return False
            del parent[label]
            return True
        if isinstance(parent, list):
            index = list_index(label)
            if index is None or index >= len(parent):
                return False
            del parent[index]
            return True
        return False

    def find(self, pattern: PathLike) -> list[str]:
        """Find all paths matching a wildcard pattern.

        Args:
            pattern: Path whose segments may be '*' (one level) or '**'
                (any number of levels, zero included).

        Returns:
            Matching dotted paths in depth-first order.

        Example:
            >>> store.import_data({'users': {'0': {'name': 'A'}, '1': {'name': 'B'}}})
            True
            >>> store.find('users.*.name')
            ['users.0.name', 'users.1.name']
        """
        return find_paths(self._data, pattern)

    def clear(self, **options: Any) -> bool:
        """Reset the store to an empty map."""
        self._data = {}
        return True

    def import_data(self, data: dict[str, Any], reset: bool = True, **options: Any) -> bool:
        """Replace the tree with a deep copy of data.

        Args:
            data: The new tree. Must be a dict.
            reset: If True (default), the store is cleared first.

        Returns:
            True.

        Raises:
            TypeError: If data is not a dict, or holds a dict with a non-str key.
            ValueError: If a dict key contains '.'.
        """
        if not isinstance(data, dict):
            raise TypeError(f"data must be dict, not {type(data).__name__}")
        tree = _stored(data)
        if reset is not False:
            self.clear()
        self._data = tree
        return True

    def export_data(self, path: PathLike = None) -> Any:
        """Export a deep copy of the tree, or of the subtree at path."""
        return self.get_branch(path)

    def _replace_root(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError(f"root value must be dict, not {type(data).__name__}")
        self._data = _stored(data)


def _assign(container: dict | list, label: str, value: Any) -> None:
    """Store value under label in a dict or list container.

    On a list the label is an existing index or len(container), which appends.
    """
    if isinstance(container, dict):
        container[label] = value
        return

    index = int(label)
    if index == len(container):
        container.append(value)
    else:
        container[index] = value


def _fits(items: list, label: str) -> bool:
    """True if label addresses an existing item of items or appends to it."""
    index = list_index(label)
    return index is not None and index <= len(items)


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"map keys must be str, not {type(key).__name__}")
    if '.' in key:
        raise ValueError(f"map key '{key}' must not contain '.'")
    return key


def _stored(node: Any) -> Any:
    """Deep copy of node for storing, with every map key checked."""
    if isinstance(node, dict):
        return {_check_key(key): _stored(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_stored(item) for item in node]
    return copy.deepcopy(node)


def _detached(node: Any) -> Any:
    """Return node itself for scalars, a deep copy for containers."""
    if isinstance(node, (dict, list)):
        return copy.deepcopy(node)
    return node
