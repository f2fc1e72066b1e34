# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TupleStore contract and the decorator base class.

Every store in this package implements TupleStore: the plain in-memory
CoreTupleStore and the layers that wrap another store to add a capability
(journaling, change notification, namespacing). Layers are composed by
wrapping, never by inheritance:

    CoreTupleStore  <-  JournaledTupleStore  <-  ObservableTupleStore

Each layer keeps a reference to the store it wraps. Several layers may wrap
the same underlying store; the store is then shared and must be used from a
single thread, one operation at a time.

Mutating options (journal, silent, transaction, reset, ...) are passed as
keyword arguments and travel down the stack unchanged: each layer reads the
ones it understands and ignores the others.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator

from .exceptions import JournalingNotSupportedError, SubscriptionNotSupportedError
from .paths import MISSING, PathLike, join_path

if TYPE_CHECKING:
    from .journal import JournalEntry, Transaction


class TupleStore(ABC):
    """Abstract path-addressable hierarchical store.

    Subclasses implement the core operations; the mapping protocol
    (store[path], path in store, del store[path]) is built on top of them.
    """

    __slots__ = ()

    @abstractmethod
    def set(self, path: PathLike, value: Any, **options: Any) -> bool:
        """Set value at path, creating intermediate maps as needed."""

    @abstractmethod
    def get(self, path: PathLike, default: Any = None) -> Any:
        """Return the value at path, or default if it does not exist."""

    @abstractmethod
    def get_branch(self, path: PathLike = None) -> Any:
        """Return a deep copy of the subtree at path ({} if missing)."""

    @abstractmethod
    def has(self, path: PathLike) -> bool:
        """True if every segment of path resolves."""

    @abstractmethod
    def delete(self, path: PathLike, **options: Any) -> bool:
        """Delete the value at path."""

    @abstractmethod
    def find(self, pattern: PathLike) -> list[str]:
        """Return the dotted paths matching a wildcard pattern."""

    @abstractmethod
    def clear(self, **options: Any) -> bool:
        """Reset the store to an empty map."""

    @abstractmethod
    def import_data(self, data: dict[str, Any], **options: Any) -> bool:
        """Replace the tree with a deep copy of data."""

    @abstractmethod
    def export_data(self, path: PathLike = None) -> Any:
        """Return a deep copy of the subtree at path (whole tree by default)."""

    # ==================== Mapping Protocol ====================

    def __getitem__(self, path: PathLike) -> Any:
        """Get value by path.

        Raises:
            KeyError: If path not found.
        """
        value = self.get(path, MISSING)
        if value is MISSING:
            raise KeyError(f"Path '{join_path(path)}' not found")
        return value

    def __setitem__(self, path: PathLike, value: Any) -> None:
        self.set(path, value)

    def __delitem__(self, path: PathLike) -> None:
        """Delete by path.

        Raises:
            KeyError: If nothing was deleted.
        """
        if not self.delete(path):
            raise KeyError(f"Path '{join_path(path)}' not found")

    def __contains__(self, path: PathLike) -> bool:
        return self.has(path)


class StoreDecorator(TupleStore):
    """Base class for layers that wrap another TupleStore.

    Read operations pass straight through to the wrapped store. Journal,
    transaction and subscription calls are forwarded too, so a capability
    stays reachable whatever layers are stacked above it; when no layer below
    provides it, the call raises JournalingNotSupportedError or
    SubscriptionNotSupportedError.

    Subclasses override the mutating operations they need to observe.
    """

    def __init__(self, store: TupleStore) -> None:
        self._store = store

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._store!r})"

    @property
    def store(self) -> TupleStore:
        """The wrapped store."""
        return self._store

    # ==================== Core Pass-through ====================

    def set(self, path: PathLike, value: Any, **options: Any) -> bool:
        return self._store.set(path, value, **options)

    def get(self, path: PathLike, default: Any = None) -> Any:
        return self._store.get(path, default)

    def get_branch(self, path: PathLike = None) -> Any:
        return self._store.get_branch(path)

    def has(self, path: PathLike) -> bool:
        return self._store.has(path)

    def delete(self, path: PathLike, **options: Any) -> bool:
        return self._store.delete(path, **options)

    def find(self, pattern: PathLike) -> list[str]:
        return self._store.find(pattern)

    def clear(self, **options: Any) -> bool:
        return self._store.clear(**options)

    def import_data(self, data: dict[str, Any], **options: Any) -> bool:
        return self._store.import_data(data, **options)

    def export_data(self, path: PathLike = None) -> Any:
        return self._store.export_data(path)

    # ==================== Capability Forwarding ====================

    def _forward(self, name: str, error: type[Exception], what: str) -> Callable[..., Any]:
        handler = getattr(self._store, name, None)
        if handler is None:
            raise error(f"Underlying store does not support {what}")
        return handler

    def begin_transaction(self) -> Transaction:
        return self._forward('begin_transaction', JournalingNotSupportedError, 'transactions')()

    def commit_transaction(self, transaction: Transaction | None = None) -> bool:
        return self._forward('commit_transaction', JournalingNotSupportedError, 'transactions')(
            transaction
        )

    def rollback_transaction(self, transaction: Transaction | None = None) -> bool:
        return self._forward('rollback_transaction', JournalingNotSupportedError, 'transactions')(
            transaction
        )

    def get_journal(self) -> list[JournalEntry]:
        return self._forward('get_journal', JournalingNotSupportedError, 'journaling')()

    def clear_journal(self) -> None:
        self._forward('clear_journal', JournalingNotSupportedError, 'journaling')()

    def set_journaling(self, enabled: bool) -> None:
        self._forward('set_journaling', JournalingNotSupportedError, 'journaling')(enabled)

    def subscribe(
        self, pattern: PathLike, callback: Callable[[Any, Any, list[str]], Any]
    ) -> Callable[[], None]:
        return self._forward('subscribe', SubscriptionNotSupportedError, 'subscriptions')(
            pattern, callback
        )

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Run a block inside a transaction.

        Commits when the block exits normally; rolls back and re-raises when
        it raises.

        Example:
            >>> with store.transaction():
            ...     store.set('account.a', 50)
            ...     store.set('account.b', 150)
        """
        tx = self.begin_transaction()
        try:
            yield tx
        except BaseException:
            self.rollback_transaction(tx)
            raise
        self.commit_transaction(tx)
