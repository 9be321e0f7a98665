"""RedisQueueBackend — sorted-set task queues with named-task de-duplication."""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import TYPE_CHECKING

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..ports.queue_backend import DispatchRequest, IQueueBackend
from ..primitives.exceptions import (
    DuplicateTaskNameError,
    QueueBackendError,
    TransientBackendError,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from redis.asyncio import Redis

logger = logging.getLogger("async_task_scheduler.redis")

KEY_PREFIX = "async_tasks"

# KEYS[1] queue, KEYS[2] name marker (only for named tasks)
# ARGV[1] member, ARGV[2] due millis, ARGV[3] name ttl millis (0 = none), ARGV[4] task id
_ENQUEUE_SCRIPT = """
if #KEYS == 2 then
    local claimed
    if tonumber(ARGV[3]) > 0 then
        claimed = redis.call('SET', KEYS[2], ARGV[4], 'NX', 'PX', ARGV[3])
    else
        claimed = redis.call('SET', KEYS[2], ARGV[4], 'NX')
    end
    if not claimed then
        return 0
    end
end
redis.call('ZADD', KEYS[1], ARGV[2], ARGV[1])
return 1
"""

# KEYS[1] name marker, ARGV[1] task id of the claim to release
_RELEASE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


class RedisQueueBackend(IQueueBackend):
    """
    Redis implementation of ``IQueueBackend``.

    Keys:

    * ``{prefix}:queue:{queue}`` — sorted set of serialized requests scored by
      the due time in epoch milliseconds.
    * ``{prefix}:name:{queue}:{name}`` — marker claimed with ``SET NX`` by a
      named request; a second request with the same name is rejected with
      ``DuplicateTaskNameError`` until the marker expires (``name_ttl``).

    With ``transactionless=False`` the name claim and the insert run in one
    Lua script, so they succeed or fail together. Transactionless requests
    issue the two commands separately and release the claim, when it is still
    theirs, if the insert fails.

    Connection and timeout errors become ``TransientBackendError``; every
    other Redis error becomes ``QueueBackendError``.
    """

    def __init__(
        self,
        redis_client: Redis[bytes],
        *,
        key_prefix: str = KEY_PREFIX,
        default_queue: str = "default",
        name_ttl: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the backend.

        Args:
            redis_client: Async Redis client instance.
            key_prefix: Prefix for all keys written by this backend.
            default_queue: Queue used when the scheduler passes ``""``.
            name_ttl: Seconds a task name stays reserved; ``None`` keeps it
                forever.
            clock: Returns the current time in seconds (overridable in tests).
        """
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._default_queue = default_queue
        self._name_ttl_ms = int(name_ttl * 1000) if name_ttl else 0
        self._clock = clock

    def queue_key(self, queue_name: str) -> str:
        return f"{self._key_prefix}:queue:{queue_name or self._default_queue}"

    def name_key(self, queue_name: str, task_name: str) -> str:
        return f"{self._key_prefix}:name:{queue_name or self._default_queue}:{task_name}"

    def due_millis(self, request: DispatchRequest) -> int:
        if request.eta_millis is not None:
            return request.eta_millis
        now = int(self._clock() * 1000)
        return now + (request.countdown_millis or 0)

    async def enqueue(
        self,
        request: DispatchRequest,
        queue_name: str,
        transactionless: bool,
    ) -> None:
        task_id = str(uuid.uuid4())
        member = json.dumps(
            {
                "id": task_id,
                "url": request.url,
                "name": request.name,
                "params": request.params,
            },
            sort_keys=True,
        )
        due = self.due_millis(request)
        queue_key = self.queue_key(queue_name)

        try:
            if transactionless:
                await self._enqueue_separately(request, queue_name, member, due, task_id)
            else:
                keys = [queue_key]
                if request.name is not None:
                    keys.append(self.name_key(queue_name, request.name))
                added = await self._redis.eval(
                    _ENQUEUE_SCRIPT,
                    len(keys),
                    *keys,
                    member,
                    due,
                    self._name_ttl_ms,
                    task_id,
                )
                if not int(added):
                    raise DuplicateTaskNameError(queue_name, str(request.name))
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise TransientBackendError(str(exc)) from exc
        except RedisError as exc:
            raise QueueBackendError(str(exc)) from exc

        logger.debug("Stored task %s in %s (due=%d)", task_id, queue_key, due)

    async def _enqueue_separately(
        self,
        request: DispatchRequest,
        queue_name: str,
        member: str,
        due: int,
        task_id: str,
    ) -> None:
        if request.name is None:
            await self._redis.zadd(self.queue_key(queue_name), {member: due})
            return

        name_key = self.name_key(queue_name, request.name)
        claimed = await self._redis.set(
            name_key,
            task_id,
            nx=True,
            px=self._name_ttl_ms or None,
        )
        if not claimed:
            raise DuplicateTaskNameError(queue_name, request.name)

        try:
            await self._redis.zadd(self.queue_key(queue_name), {member: due})
        except RedisError:
            # A name stays claimed only while its task is stored.
            await self._release_claim(name_key, task_id)
            raise

    async def _release_claim(self, name_key: str, task_id: str) -> None:
        try:
            await self._redis.eval(_RELEASE_SCRIPT, 1, name_key, task_id)
        except RedisError as exc:
            logger.warning("Could not release task name %s: %s", name_key, exc)

    async def health_check(self) -> bool:
        """Return True if Redis answers a PING."""
        try:
            await self._redis.ping()
            return True
        except RedisError:
            return False
