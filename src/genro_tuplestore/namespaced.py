# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Namespaced view over a shared store.

NamespacedTupleStore prefixes every path and pattern with a fixed namespace
before delegating to the store it wraps. It keeps no data of its own, so
several namespaces can share one store:

    shared = create_tuple_store()
    users = NamespacedTupleStore(shared, 'users')
    settings = NamespacedTupleStore(shared, 'settings')

    users.set('john.age', 30)       # shared path 'users.john.age'
    settings.set('theme', 'dark')   # shared path 'settings.theme'

The shared store is used by reference: every view reads and writes the same
tree, one operation at a time.
"""

from __future__ import annotations

from typing import Any, Callable

from .base import StoreDecorator, TupleStore
from .paths import PathLike, join_path, normalize_path


class NamespacedTupleStore(StoreDecorator):
    """A TupleStore view rooted at namespace inside another store.

    Journal, transaction and subscription calls reach the wrapped store;
    subscription callbacks receive paths relative to the namespace.

    Example:
        >>> users = NamespacedTupleStore(CoreTupleStore(), 'users')
        >>> users.set('john.name', 'John')
        True
        >>> users.store.get('users.john.name')
        'John'
    """

    def __init__(self, store: TupleStore, namespace: PathLike) -> None:
        """Initialize a NamespacedTupleStore.

        Args:
            store: The shared store to write into.
            namespace: Prefix path, dotted string or segments.

        Raises:
            ValueError: If namespace is empty.
        """
        super().__init__(store)
        self._prefix = normalize_path(namespace)
        if not self._prefix:
            raise ValueError("namespace must not be empty")
        self._wrappers: dict[tuple[str, Callable[..., Any]], Callable[..., Any]] = {}

    def __repr__(self) -> str:
        return f"NamespacedTupleStore({self.namespace!r}, {self._store!r})"

    @property
    def namespace(self) -> str:
        return join_path(self._prefix)

    def _prefixed(self, path: PathLike) -> list[str]:
        return self._prefix + normalize_path(path)

    def _local(self, parts: list[str]) -> list[str]:
        return parts[len(self._prefix):]

    # ==================== Core API ====================

    def set(self, path: PathLike, value: Any, **options: Any) -> bool:
        return self._store.set(self._prefixed(path), value, **options)

    def get(self, path: PathLike, default: Any = None) -> Any:
        return self._store.get(self._prefixed(path), default)

    def get_branch(self, path: PathLike = None) -> Any:
        return self._store.get_branch(self._prefixed(path))

    def has(self, path: PathLike) -> bool:
        return self._store.has(self._prefixed(path))

    def delete(self, path: PathLike, **options: Any) -> bool:
        """Delete inside the namespace. The namespace root itself cannot be deleted."""
        parts = normalize_path(path)
        if not parts:
            return False
        return self._store.delete(self._prefix + parts, **options)

    def find(self, pattern: PathLike) -> list[str]:
        """Find paths inside the namespace, relative to it and without duplicates."""
        matches = self._store.find(self._prefixed(pattern))
        results: dict[str, None] = {}
        for match in matches:
            local = self._local(normalize_path(match))
            results.setdefault(join_path(local), None)
        return list(results)

    def clear(self, **options: Any) -> bool:
        """Remove everything in the namespace, leaving the rest of the store alone."""
        if self._store.has(self._prefix):
            self._store.delete(self._prefix, **options)
        return True

    def import_data(self, data: dict[str, Any], **options: Any) -> bool:
        """Replace the namespace content with a deep copy of data.

        Only the namespace subtree changes; sibling namespaces are kept.

        Raises:
            TypeError: If data is not a dict.
        """
        if not isinstance(data, dict):
            raise TypeError(f"data must be dict, not {type(data).__name__}")
        options.pop('reset', None)
        return self._store.set(self._prefix, data, **options)

    def export_data(self, path: PathLike = None) -> Any:
        return self._store.export_data(self._prefixed(path))

    # ==================== Subscriptions ====================

    def subscribe(
        self, pattern: PathLike, callback: Callable[[Any, Any, list[str]], Any]
    ) -> Callable[[], None]:
        """Subscribe to changes inside the namespace.

        The pattern is relative to the namespace and so is the path passed
        to callback. As on the wrapped store, a callback subscribed twice to
        the same pattern is called once.
        """
        parts = self._prefixed(pattern)
        key = (join_path(parts), callback)
        wrapper = self._wrappers.get(key) or self._relative(callback)
        unsubscribe = super().subscribe(parts, wrapper)
        self._wrappers[key] = wrapper

        def cancel() -> None:
            unsubscribe()
            if self._wrappers.get(key) is wrapper:
                del self._wrappers[key]

        return cancel

    def _relative(self, callback: Callable[[Any, Any, list[str]], Any]) -> Callable[..., Any]:
        def relative_callback(new_value: Any, old_value: Any, path: list[str]) -> Any:
            return callback(new_value, old_value, self._local(path))

        return relative_callback
