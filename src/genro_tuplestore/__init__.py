# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TupleStore - Path-addressable hierarchical data with journaling and subscriptions.

A lightweight, zero-dependency library for the Genro ecosystem (Genro Kyō):
values are read and written with dotted paths into a nested tree of maps and
sequences, with optional layers for a write journal with transactions and for
change subscriptions with wildcard patterns.
"""

__version__ = "0.1.0"

from .base import StoreDecorator, TupleStore
from .exceptions import (
    JournalingNotSupportedError,
    SubscriptionNotSupportedError,
    TransactionError,
    TupleStoreError,
)
from .factory import StoreConfig, TupleStoreFactory, create_tuple_store
from .journal import EntryKind, JournaledTupleStore, JournalEntry, Operation, Transaction
from .namespaced import NamespacedTupleStore
from .observable import ObservableTupleStore, SubscriberCallback
from .paths import MISSING, join_path, normalize_path
from .pattern import find_paths, matches_pattern
from .store import CoreTupleStore

__all__ = [
    # Core classes
    "TupleStore",
    "StoreDecorator",
    "CoreTupleStore",
    # Layers
    "JournaledTupleStore",
    "ObservableTupleStore",
    "NamespacedTupleStore",
    # Journal
    "EntryKind",
    "JournalEntry",
    "Operation",
    "Transaction",
    # Subscriptions
    "SubscriberCallback",
    # Factory
    "StoreConfig",
    "TupleStoreFactory",
    "create_tuple_store",
    # Paths and patterns
    "MISSING",
    "normalize_path",
    "join_path",
    "find_paths",
    "matches_pattern",
    # Exceptions
    "TupleStoreError",
    "TransactionError",
    "JournalingNotSupportedError",
    "SubscriptionNotSupportedError",
]
