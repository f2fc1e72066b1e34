# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TupleStore exceptions.

Data-path operations (get, set, delete, ...) never raise for missing paths:
they report failure through their return value. Exceptions are reserved for
programmer errors such as breaking the transaction discipline.
"""

from __future__ import annotations


class TupleStoreError(Exception):
    """Base exception for TupleStore errors."""

    pass


class TransactionError(TupleStoreError):
    """Raised when a transaction is opened, committed or rolled back out of turn."""

    pass


class JournalingNotSupportedError(TupleStoreError):
    """Raised when a journal or transaction call reaches a store without journaling."""

    pass


class SubscriptionNotSupportedError(TupleStoreError):
    """Raised when subscribe() reaches a store without change notification."""

    pass
