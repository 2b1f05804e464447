"""Services Layer — stores, ledger, transition engine, leaderboard and winner selection.

Invariants:
    - Every public coroutine is one short read-modify-write that commits (or rolls back) itself
    - Sessions and the clock are injected; no module-level mutable state
"""
