# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Factory functions assembling store stacks.

The layers are always stacked in the same order:

    ObservableTupleStore( JournaledTupleStore( CoreTupleStore() ) )

so notifications are sent only after the journal has recorded the change.

Example:
    >>> store = create_tuple_store()                      # journal + observable
    >>> store = create_tuple_store(observable=False)      # journal only
    >>> store = create_tuple_store(StoreConfig(journal=False))
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .base import TupleStore
from .journal import DEFAULT_MAX_JOURNAL_ENTRIES, JournaledTupleStore
from .observable import ObservableTupleStore
from .store import CoreTupleStore


@dataclass(frozen=True)
class StoreConfig:
    """Which layers to stack and how to configure them.

    Attributes:
        journal: Add the journaling/transaction layer.
        observable: Add the subscription layer.
        journal_enabled: Whether journaling starts enabled.
        max_journal_entries: Journal bound.
    """
    journal: bool = True
    observable: bool = True
    journal_enabled: bool = True
    max_journal_entries: int = DEFAULT_MAX_JOURNAL_ENTRIES


def create_tuple_store(config: StoreConfig | None = None, **overrides: Any) -> TupleStore:
    """Create a store with the requested capabilities.

    Args:
        config: Base configuration. Defaults to StoreConfig().
        **overrides: StoreConfig fields overriding config.

    Returns:
        The outermost layer of the stack.

    Raises:
        TypeError: If an override is not a StoreConfig field.
    """
    config = replace(config or StoreConfig(), **overrides)

    store: TupleStore = CoreTupleStore()
    if config.journal:
        store = JournaledTupleStore(
            store,
            journal_enabled=config.journal_enabled,
            max_journal_entries=config.max_journal_entries,
        )
    if config.observable:
        store = ObservableTupleStore(store)
    return store


class TupleStoreFactory:
    """Named constructors for the common store stacks."""

    @staticmethod
    def create_basic() -> CoreTupleStore:
        """A plain store without journaling or subscriptions."""
        return CoreTupleStore()

    @staticmethod
    def create_journaled() -> JournaledTupleStore:
        return JournaledTupleStore(CoreTupleStore())

    @staticmethod
    def create_observable() -> ObservableTupleStore:
        return ObservableTupleStore(CoreTupleStore())

    @staticmethod
    def create_full_featured() -> ObservableTupleStore:
        """Journaling and subscriptions, the default stack."""
        return ObservableTupleStore(JournaledTupleStore(CoreTupleStore()))

    @staticmethod
    def create(config: StoreConfig | None = None, **overrides: Any) -> TupleStore:
        return create_tuple_store(config, **overrides)
