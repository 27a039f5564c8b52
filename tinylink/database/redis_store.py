"""Redis implementation of the link store.

Layout:
    tinylink:link:{code}    hash with code, target_url, email, total_clicks,
                            last_clicked, created_at
    tinylink:owner:{email}  sorted set of codes scored by creation time (µs)

Insert, visit and delete each run as one Lua script, which Redis executes
atomically. The delete script derives the owner key from the hash, so the
store targets a single Redis node rather than a cluster.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from ..errors import DuplicateCodeError, StorageUnavailableError
from .base import LinkStoreBase
from .models import Link


KEY_PREFIX = "tinylink"

INSERT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1],
    'code', ARGV[1], 'target_url', ARGV[2], 'email', ARGV[3],
    'total_clicks', 0, 'created_at', ARGV[4])
redis.call('ZADD', KEYS[2], ARGV[5], ARGV[1])
return 1
"""

RECORD_VISIT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return false
end
redis.call('HINCRBY', KEYS[1], 'total_clicks', 1)
redis.call('HSET', KEYS[1], 'last_clicked', ARGV[1])
return redis.call('HGET', KEYS[1], 'target_url')
"""

DELETE_SCRIPT = """
local email = redis.call('HGET', KEYS[1], 'email')
if not email then
    return 0
end
redis.call('DEL', KEYS[1])
redis.call('ZREM', ARGV[2] .. email, ARGV[1])
return 1
"""

CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)


class RedisLinkStore(LinkStoreBase):
    """Redis link store using server-side scripts for atomic updates."""

    name = "redis"

    def __init__(
        self,
        redis_url: str,
        logger: Optional[logging.Logger] = None,
        client: Optional[redis.Redis] = None,
    ):
        """Initialize Redis store.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            logger: Optional logger instance
            client: Optional pre-built client (used instead of redis_url)
        """
        self.redis_url = redis_url
        self.logger = logger or logging.getLogger(__name__)
        self.client = client or redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        self._insert = self.client.register_script(INSERT_SCRIPT)
        self._record_visit = self.client.register_script(RECORD_VISIT_SCRIPT)
        self._delete = self.client.register_script(DELETE_SCRIPT)

    @staticmethod
    def link_key(code: str) -> str:
        return f"{KEY_PREFIX}:link:{code}"

    @staticmethod
    def owner_key(email: str) -> str:
        return f"{KEY_PREFIX}:owner:{email}"

    async def initialize(self) -> None:
        try:
            await self.client.ping()
        except CONNECTION_ERRORS as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            raise StorageUnavailableError("Redis unavailable") from e
        self.logger.info("Connected to Redis")

    async def insert(self, code: str, destination_url: str, owner_email: str) -> Link:
        self._check_code(code)
        created_at = datetime.now(timezone.utc)
        score = int(created_at.timestamp() * 1_000_000)

        try:
            created = await self._insert(
                keys=[self.link_key(code), self.owner_key(owner_email)],
                args=[code, destination_url, owner_email, created_at.isoformat(), score],
            )
        except CONNECTION_ERRORS as e:
            raise self._unavailable(e) from e

        if not created:
            raise DuplicateCodeError(code)

        self.logger.debug(f"Inserted link {code} -> {destination_url}")
        return Link(
            code=code,
            destination_url=destination_url,
            owner_email=owner_email,
            created_at=created_at,
        )

    async def find_by_code(self, code: str) -> Optional[Link]:
        try:
            data = await self.client.hgetall(self.link_key(code))
        except CONNECTION_ERRORS as e:
            raise self._unavailable(e) from e
        return self._to_link(data)

    async def list_by_owner(self, email: str) -> List[Link]:
        try:
            codes = await self.client.zrevrange(self.owner_key(email), 0, -1)
            if not codes:
                return []
            async with self.client.pipeline(transaction=False) as pipe:
                for code in codes:
                    pipe.hgetall(self.link_key(code))
                records = await pipe.execute()
        except CONNECTION_ERRORS as e:
            raise self._unavailable(e) from e

        links = []
        for data in records:
            link = self._to_link(data)
            # deleted between the two round trips
            if link is not None:
                links.append(link)
        return links

    async def record_visit(self, code: str) -> Optional[str]:
        now = datetime.now(timezone.utc).isoformat()
        try:
            return await self._record_visit(keys=[self.link_key(code)], args=[now])
        except CONNECTION_ERRORS as e:
            raise self._unavailable(e) from e

    async def delete_by_code(self, code: str) -> bool:
        try:
            removed = await self._delete(
                keys=[self.link_key(code)],
                args=[code, f"{KEY_PREFIX}:owner:"],
            )
        except CONNECTION_ERRORS as e:
            raise self._unavailable(e) from e
        return bool(removed)

    async def health_check(self) -> bool:
        try:
            return bool(await self.client.ping())
        except CONNECTION_ERRORS as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
        self.logger.info("Redis connection closed")

    def _to_link(self, data: dict) -> Optional[Link]:
        if not data:
            return None
        return Link.from_record({**data, "last_clicked": data.get("last_clicked")})

    def _unavailable(self, error: Exception) -> StorageUnavailableError:
        self.logger.error(f"Redis error: {error}")
        return StorageUnavailableError("Redis unavailable")
