"""
Per-unit lock registry.

Occupancy writes for one unit run one at a time inside this process; the row
lock taken with ``SELECT ... FOR UPDATE`` covers other processes on databases
that support it.
"""

import asyncio
import weakref


class UnitLockRegistry:
    """Hands out one ``asyncio.Lock`` per unit id."""

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, unit_id: int) -> asyncio.Lock:
        lock = self._locks.get(unit_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[unit_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


unit_locks = UnitLockRegistry()
