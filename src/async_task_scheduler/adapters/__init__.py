"""Queue backend adapters.

``RedisQueueBackend`` lives in :mod:`.redis_backend` and needs the ``redis``
extra.
"""

from .memory import EnqueuedTask, InMemoryQueueBackend

__all__ = [
    "EnqueuedTask",
    "InMemoryQueueBackend",
]
