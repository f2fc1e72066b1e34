# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Application State - Shared state with undo-able updates and live views.

This example keeps the state of a small application in one TupleStore and
shows the layers working together:

    shared = create_tuple_store()                 # journal + subscriptions
    users = NamespacedTupleStore(shared, 'users')
    settings = NamespacedTupleStore(shared, 'settings')

    users.subscribe('*.status', on_status)        # relative patterns
    with shared.transaction():                    # all or nothing
        users.set('john.balance', 50)
        users.set('jane.balance', 150)

Run it with:

    python examples/app_state/app_state.py
"""

import logging

from genro_tuplestore import NamespacedTupleStore, create_tuple_store


def on_status(new_value, old_value, path):
    print(f"  status of {path[0]}: {old_value} -> {new_value}")


def on_theme(new_value, old_value, path):
    print(f"  theme changed to {new_value}")


def transfer(store, source, target, amount):
    """Move amount between two user balances, atomically."""
    with store.transaction():
        balance = store.get(f'{source}.balance')
        if balance < amount:
            raise ValueError(f"{source} cannot pay {amount}")
        store.set(f'{source}.balance', balance - amount)
        store.set(f'{target}.balance', store.get(f'{target}.balance', 0) + amount)


def main():
    logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    shared = create_tuple_store(max_journal_entries=50)
    users = NamespacedTupleStore(shared, 'users')
    settings = NamespacedTupleStore(shared, 'settings')

    users.subscribe('*.status', on_status)
    settings.subscribe('theme', on_theme)

    print("Loading users:")
    users.import_data({
        'john': {'balance': 100, 'status': 'offline'},
        'jane': {'balance': 20, 'status': 'offline'},
    })
    users.set('john.status', 'online')
    settings.set('theme', 'dark')

    print("\nTransfers:")
    transfer(users, 'john', 'jane', 30)
    try:
        transfer(users, 'jane', 'john', 500)
    except ValueError as e:
        print(f"  rejected: {e}")

    print("\nBalances:", {name: users.get(f'{name}.balance') for name in users.find('*')})
    print("Online:", [path.split('.')[0] for path in users.find('*.status')
                      if users.get(path) == 'online'])

    print("\nJournal:")
    for entry in shared.get_journal():
        print(" ", entry.kind.value, '.'.join(entry.path or []))

    print("\nShared tree:", shared.export_data())


if __name__ == '__main__':
    main()
