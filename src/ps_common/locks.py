"""Per-prediction mutual exclusion inside one process.

Cross-process serialization comes from SELECT ... FOR UPDATE on the
prediction row; this lock keeps one process from interleaving its own
coroutines on the same prediction while they wait on the database.

A lock lives only while some coroutine holds or waits for it, so ids that
arrive from the URL never accumulate in the table.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class PredictionLocks:
    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def active(self) -> int:
        """Number of predictions with a holder or waiter right now."""
        return len(self._locks)

    @asynccontextmanager
    async def for_prediction(self, prediction_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(prediction_id, asyncio.Lock())
        self._users[prediction_id] = self._users.get(prediction_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[prediction_id] -= 1
            if self._users[prediction_id] == 0:
                del self._users[prediction_id]
                del self._locks[prediction_id]


# One lock domain shared by every service that mutates a prediction.
prediction_locks = PredictionLocks()
