# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Store package - The in-memory hierarchical container.

This package provides CoreTupleStore, the plain TupleStore implementation
that the journaling, observable and namespaced layers wrap.

Example:
    >>> from genro_tuplestore import CoreTupleStore
    >>> store = CoreTupleStore()
    >>> store.set('config.name', 'MyApp')
    True
    >>> store['config.name']
    'MyApp'
"""

from .core import CoreTupleStore

__all__ = ["CoreTupleStore"]
