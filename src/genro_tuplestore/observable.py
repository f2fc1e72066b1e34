# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Change notification.

ObservableTupleStore wraps another TupleStore and notifies subscribers after
every successful mutation, unless the call passes silent=True.

Subscriptions are keyed by pattern string. A pattern may be an exact path or
use the '*' and '**' wildcards (see the pattern module). Callbacks receive:

    callback(new_value, old_value, path)

where path is the list of segments of the changed location and absent values
are None. set() and delete() notify at the written path; import_data() and
clear() notify once at the root path ([]) with the whole new and old trees,
so subscribers to deeper paths are not told about bulk replacements.

A callback that raises is logged and skipped; the remaining callbacks are
still notified. Callbacks may subscribe and unsubscribe freely, but must not
mutate the store while one of its find() calls is in progress.

Example:
    >>> store = ObservableTupleStore()
    >>> changes = []
    >>> unsubscribe = store.subscribe('user.*', lambda new, old, path: changes.append(path))
    >>> store.set('user.name', 'John')
    True
    >>> store.set('user.profile.email', 'john@example.com')
    True
    >>> changes
    [['user', 'name']]
    >>> unsubscribe()
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .base import StoreDecorator, TupleStore
from .paths import PathLike, join_path, normalize_path
from .pattern import ANY_SEGMENT, matches_pattern
from .store import CoreTupleStore

logger = logging.getLogger(__name__)

# (new_value, old_value, path_segments)
SubscriberCallback = Callable[[Any, Any, list[str]], Any]


class ObservableTupleStore(StoreDecorator):
    """TupleStore layer adding change subscriptions.

    Mutating methods understand the silent option: silent=True applies the
    change without notifying anyone.
    """

    def __init__(self, store: TupleStore | None = None) -> None:
        """Initialize an ObservableTupleStore.

        Args:
            store: The store to wrap. A new CoreTupleStore if omitted.
        """
        super().__init__(store if store is not None else CoreTupleStore())
        self._subscribers: dict[str, list[SubscriberCallback]] = {}

    # ==================== Mutations ====================

    def set(self, path: PathLike, value: Any, silent: bool = False, **options: Any) -> bool:
        """Set a value and notify subscribers."""
        parts = normalize_path(path)
        old_value = self._store.get(parts)

        result = self._store.set(parts, value, silent=silent, **options)

        if result and not silent:
            self._notify(parts, value, old_value)
        return result

    def delete(self, path: PathLike, silent: bool = False, **options: Any) -> bool:
        """Delete a value and notify subscribers with new_value None."""
        parts = normalize_path(path)
        old_value = self._store.get(parts)

        result = self._store.delete(parts, silent=silent, **options)

        if result and not silent:
            self._notify(parts, None, old_value)
        return result

    def import_data(self, data: dict[str, Any], silent: bool = False, **options: Any) -> bool:
        """Import data and notify root subscribers."""
        old_state = None if silent else self._store.export_data()

        result = self._store.import_data(data, silent=silent, **options)

        if result and not silent:
            self._notify([], self._store.export_data(), old_state)
        return result

    def clear(self, silent: bool = False, **options: Any) -> bool:
        """Clear the store and notify root subscribers."""
        old_state = None if silent else self._store.export_data()

        result = self._store.clear(silent=silent, **options)

        if result and not silent:
            self._notify([], {}, old_state)
        return result

    # ==================== Subscriptions ====================

    def subscribe(self, pattern: PathLike, callback: SubscriberCallback) -> Callable[[], None]:
        """Subscribe to changes at paths matching pattern.

        Args:
            pattern: Exact path or wildcard pattern (string or segments).
            callback: Called as callback(new_value, old_value, path).

        Returns:
            A function that cancels this subscription. Calling it more than
            once does nothing.

        Example:
            >>> unsubscribe = store.subscribe('user.**', on_user_change)
            >>> unsubscribe()
        """
        key = join_path(pattern)
        handlers = self._subscribers.setdefault(key, [])
        if callback not in handlers:
            handlers.append(callback)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(key)
            if handlers is None or callback not in handlers:
                return
            handlers.remove(callback)
            if not handlers:
                del self._subscribers[key]

        return unsubscribe

    def subscription_count(self, pattern: PathLike = None) -> int:
        """Number of callbacks registered on pattern, or on all patterns if None."""
        if pattern is None:
            return sum(len(handlers) for handlers in self._subscribers.values())
        return len(self._subscribers.get(join_path(pattern), ()))

    def _notify(self, parts: list[str], new_value: Any, old_value: Any) -> None:
        """Invoke every callback whose pattern matches parts."""
        path_str = '.'.join(parts)

        for pattern, callbacks in list(self._subscribers.items()):
            if pattern != path_str and not (
                ANY_SEGMENT in pattern and matches_pattern(path_str, pattern)
            ):
                continue
            for callback in list(callbacks):
                try:
                    callback(new_value, old_value, list(parts))
                except Exception:
                    logger.exception("Error in subscriber callback for '%s'", pattern)
