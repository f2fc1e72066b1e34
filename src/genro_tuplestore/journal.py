# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Journaling and transactions.

JournaledTupleStore wraps another TupleStore and records every successful
mutation in a bounded journal. Mutations made while a transaction is open are
buffered in the transaction instead, and end up in the journal as a single
'transaction' entry on commit.

Transactions:
    At most one transaction is open per store. Writes inside a transaction
    are applied immediately; commit only finalizes the bookkeeping, rollback
    undoes the buffered writes in reverse order:

        - set: restore the previous value (delete the path if it had none)
        - delete: restore the previous value (nothing to do if it had none)

    A write that reshapes an ancestor, like creating intermediate maps or
    removing an item from a list, is undone by restoring that ancestor.

    clear() and import_data() are never buffered and cannot be rolled back.
    Writes made by a rollback bypass every layer above this one, so they are
    neither journaled nor notified.

Example:
    >>> store = JournaledTupleStore()
    >>> store.set('user.balance', 100)
    True
    >>> with store.transaction():
    ...     _ = store.set('user.balance', 50)
    ...     raise RuntimeError('transfer failed')
    Traceback (most recent call last):
    ...
    RuntimeError: transfer failed
    >>> store.get('user.balance')
    100
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .base import StoreDecorator, TupleStore
from .exceptions import TransactionError
from .paths import MISSING, PathLike, normalize_path
from .pattern import list_index
from .store import CoreTupleStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_JOURNAL_ENTRIES = 1000


class EntryKind(str, Enum):
    """Kinds of journal entries and buffered operations."""
    SET = "set"
    DELETE = "delete"
    CLEAR = "clear"
    IMPORT = "import"
    TRANSACTION = "transaction"


@dataclass
class Operation:
    """A write buffered in an open transaction.

    old_value is MISSING when the path did not exist before the write.

    When the write also reshaped an ancestor (created missing maps, replaced a
    scalar by a map, appended to or converted a list), undo_path is the outermost
    node it changed and undo_value that node before the write, MISSING if it
    did not exist. Rollback then restores undo_path instead of path.
    """
    kind: EntryKind
    path: list[str]
    value: Any = None
    old_value: Any = MISSING
    undo_path: list[str] | None = None
    undo_value: Any = MISSING

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "path": list(self.path),
            "value": self.value,
            "old_value": None if self.old_value is MISSING else self.old_value,
        }


@dataclass
class JournalEntry:
    """A single journal record.

    Which fields are set depends on the kind:

        - set/delete: path, value (set only), old_value
        - clear: previous_state, the whole tree before clearing
        - import: data, the imported data
        - transaction: id and the buffered operations
    """
    kind: EntryKind
    timestamp: datetime
    path: list[str] | None = None
    value: Any = None
    old_value: Any = MISSING
    data: Any = None
    id: str | None = None
    operations: list[Operation] | None = None
    previous_state: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.path is not None:
            result["path"] = list(self.path)
        if self.kind is EntryKind.SET:
            result["value"] = self.value
        if self.old_value is not MISSING:
            result["old_value"] = self.old_value
        if self.data is not None:
            result["data"] = self.data
        if self.id is not None:
            result["id"] = self.id
        if self.operations is not None:
            result["operations"] = [op.to_dict() for op in self.operations]
        if self.previous_state is not None:
            result["previous_state"] = self.previous_state
        return result


@dataclass(eq=False)
class Transaction:
    """A group of writes that is committed or rolled back as a whole.

    Transactions compare by identity: only the very object returned by
    begin_transaction() can commit or roll it back.
    """
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operations: list[Operation] = field(default_factory=list)


class JournaledTupleStore(StoreDecorator):
    """TupleStore layer adding a write journal and transactions.

    Mutating methods understand two options:

        - journal: if False, this call writes no standalone journal entry
          (it is still buffered by an open transaction)
        - transaction: buffer the write in this transaction instead of the
          current one

    Example:
        >>> store = JournaledTupleStore(max_journal_entries=100)
        >>> store.set('user.name', 'John')
        True
        >>> [entry.kind.value for entry in store.get_journal()]
        ['set']
    """

    def __init__(
        self,
        store: TupleStore | None = None,
        journal_enabled: bool = True,
        max_journal_entries: int = DEFAULT_MAX_JOURNAL_ENTRIES,
    ) -> None:
        """Initialize a JournaledTupleStore.

        Args:
            store: The store to wrap. A new CoreTupleStore if omitted.
            journal_enabled: Whether journaling starts enabled.
            max_journal_entries: Journal bound; older entries are evicted.

        Raises:
            ValueError: If max_journal_entries is not positive.
        """
        if max_journal_entries <= 0:
            raise ValueError("max_journal_entries must be a positive integer")
        super().__init__(store if store is not None else CoreTupleStore())
        self._journal: list[JournalEntry] = []
        self._journal_enabled = journal_enabled is not False
        self._max_journal_entries = max_journal_entries
        self._current_transaction: Transaction | None = None

    @property
    def journal_enabled(self) -> bool:
        return self._journal_enabled

    @property
    def max_journal_entries(self) -> int:
        return self._max_journal_entries

    @property
    def current_transaction(self) -> Transaction | None:
        """The open transaction, or None."""
        return self._current_transaction

    # ==================== Mutations ====================

    def set(
        self,
        path: PathLike,
        value: Any,
        journal: bool = True,
        transaction: Transaction | None = None,
        **options: Any,
    ) -> bool:
        """Set a value, journaling the change."""
        parts = normalize_path(path)
        old_value = self._store.get(parts, MISSING)
        undo = None
        if old_value is MISSING and self._buffering(transaction):
            undo = self._undo_point(parts)

        result = self._store.set(parts, value, journal=journal, transaction=transaction, **options)

        if result:
            self._record(
                EntryKind.SET, parts, copy.deepcopy(value), old_value, journal, transaction, undo
            )
        return result

    def delete(
        self,
        path: PathLike,
        journal: bool = True,
        transaction: Transaction | None = None,
        **options: Any,
    ) -> bool:
        """Delete a value, journaling the change."""
        parts = normalize_path(path)
        old_value = self._store.get(parts, MISSING)
        undo = None
        if len(parts) > 1 and list_index(parts[-1]) is not None and self._buffering(transaction):
            # removing a list item shifts its siblings
            parent = self._store.get(parts[:-1], MISSING)
            if isinstance(parent, list):
                undo = (parts[:-1], parent)

        result = self._store.delete(parts, journal=journal, transaction=transaction, **options)

        if result:
            self._record(EntryKind.DELETE, parts, None, old_value, journal, transaction, undo)
        return result

    def clear(self, journal: bool = True, clear_journal: bool = True, **options: Any) -> bool:
        """Clear the store.

        When journaling, the entry written carries a snapshot of the whole
        tree as it was before clearing. Unless clear_journal is False, the
        journal itself is emptied first, so that entry is then the only one.
        """
        journaling = journal is not False and self._journal_enabled
        snapshot = self._store.export_data() if journaling else None

        if clear_journal is not False:
            self.clear_journal()

        result = self._store.clear(journal=journal, clear_journal=clear_journal, **options)

        if journaling and result:
            self._add_entry(JournalEntry(
                kind=EntryKind.CLEAR,
                timestamp=_now(),
                previous_state=snapshot,
            ))
        return result

    def import_data(self, data: dict[str, Any], journal: bool = True, **options: Any) -> bool:
        """Import data, journaling the imported data (not the resulting tree)."""
        result = self._store.import_data(data, journal=journal, **options)

        if journal is not False and self._journal_enabled and result:
            self._add_entry(JournalEntry(
                kind=EntryKind.IMPORT,
                timestamp=_now(),
                data=copy.deepcopy(data),
            ))
        return result

    def _record(
        self,
        kind: EntryKind,
        parts: list[str],
        value: Any,
        old_value: Any,
        journal: bool,
        transaction: Transaction | None,
        undo: tuple[list[str], Any] | None = None,
    ) -> None:
        """Buffer a successful write in the transaction, or journal it."""
        tx = transaction if transaction is not None else self._current_transaction
        if tx is not None:
            operation = Operation(kind, parts, value, old_value)
            if undo is not None:
                operation.undo_path, operation.undo_value = undo
            tx.operations.append(operation)
        elif journal is not False and self._journal_enabled:
            self._add_entry(JournalEntry(
                kind=kind,
                timestamp=_now(),
                path=parts,
                value=value,
                old_value=old_value,
            ))

    def _buffering(self, transaction: Transaction | None) -> bool:
        return transaction is not None or self._current_transaction is not None

    def _undo_point(self, parts: list[str]) -> tuple[list[str], Any]:
        """Outermost node a set of the missing path parts will change.

        Returns (path, value before the write), value MISSING when the node
        does not exist yet.
        """
        for depth in range(1, len(parts) + 1):
            if self._store.has(parts[:depth]):
                continue
            parent = parts[:depth - 1]
            if parent:
                node = self._store.get(parent, MISSING)
                if not isinstance(node, dict):
                    return parent, node
            return parts[:depth], MISSING
        return parts, MISSING

    # ==================== Transactions ====================

    def begin_transaction(self) -> Transaction:
        """Open a transaction.

        Raises:
            TransactionError: If a transaction is already open.
        """
        if self._current_transaction is not None:
            raise TransactionError("Cannot begin a transaction while another is in progress")

        self._current_transaction = Transaction()
        logger.debug("Transaction started: %s", self._current_transaction.id)
        return self._current_transaction

    def commit_transaction(self, transaction: Transaction | None = None) -> bool:
        """Commit the current transaction.

        The buffered writes are already applied; commit journals them as one
        'transaction' entry (when journaling is enabled) and closes the
        transaction.

        Args:
            transaction: Must be the current transaction if given.

        Raises:
            TransactionError: If there is no open transaction, or transaction
                is not the current one.
        """
        tx = self._check_current(transaction, 'commit')

        if self._journal_enabled:
            self._add_entry(JournalEntry(
                kind=EntryKind.TRANSACTION,
                timestamp=_now(),
                id=tx.id,
                operations=list(tx.operations),
            ))

        self._current_transaction = None
        logger.debug("Transaction committed: %s (%d operations)", tx.id, len(tx.operations))
        return True

    def rollback_transaction(self, transaction: Transaction | None = None) -> bool:
        """Undo the writes of the current transaction, most recent first.

        Args:
            transaction: Must be the current transaction if given.

        Raises:
            TransactionError: If there is no open transaction, or transaction
                is not the current one.
        """
        tx = self._check_current(transaction, 'rollback')

        for op in reversed(tx.operations):
            if op.undo_path is not None:
                path, old_value = op.undo_path, op.undo_value
            else:
                path, old_value = op.path, op.old_value

            if old_value is not MISSING:
                self._store.set(path, old_value)
            elif op.kind is EntryKind.SET:
                self._store.delete(path)

        self._current_transaction = None
        logger.debug("Transaction rolled back: %s (%d operations reverted)", tx.id, len(tx.operations))
        return True

    def _check_current(self, transaction: Transaction | None, action: str) -> Transaction:
        tx = transaction if transaction is not None else self._current_transaction
        if tx is None:
            raise TransactionError(f"No transaction to {action}")
        if tx is not self._current_transaction:
            raise TransactionError(f"Cannot {action} a transaction that is not the current one")
        return tx

    # ==================== Journal ====================

    def _add_entry(self, entry: JournalEntry) -> None:
        if not self._journal_enabled:
            return

        self._journal.append(entry)

        excess = len(self._journal) - self._max_journal_entries
        if excess > 0:
            del self._journal[:excess]
            logger.debug("Journal trimmed: %d oldest entries evicted", excess)

    def get_journal(self) -> list[JournalEntry]:
        """Return a copy of the journal, oldest entry first."""
        return list(self._journal)

    def clear_journal(self) -> None:
        """Remove every journal entry."""
        self._journal = []

    def set_journaling(self, enabled: bool) -> None:
        """Enable or disable journaling. Disabling also clears the journal."""
        self._journal_enabled = bool(enabled)
        if not enabled:
            self.clear_journal()


def _now() -> datetime:
    return datetime.now(timezone.utc)
