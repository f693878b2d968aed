from abc import ABC, abstractmethod

import redis.asyncio as redis
from loguru import logger
from pydantic import ValidationError

from codescore.core.config import settings
from codescore.models.profile import Platform, ProfileRecord


class ProfileStore(ABC):
    """
    Persistence contract for profile records and per-user totals.

    Records are keyed by (user_id, platform); saving is create-or-update, so at
    most one record exists per pair. Saving a record also registers the user as
    known for bulk aggregation.
    """

    @abstractmethod
    async def get_record(self, user_id: str, platform: Platform) -> ProfileRecord | None: ...

    @abstractmethod
    async def save_record(self, record: ProfileRecord) -> None: ...

    @abstractmethod
    async def list_records(self, user_id: str) -> list[ProfileRecord]: ...

    @abstractmethod
    async def list_user_ids(self) -> list[str]: ...

    @abstractmethod
    async def get_total_score(self, user_id: str) -> int: ...

    @abstractmethod
    async def set_total_score(self, user_id: str, total: int) -> None: ...

    async def close(self) -> None:
        return None


class InMemoryProfileStore(ProfileStore):
    """Process-local store for development and tests."""

    def __init__(self) -> None:
        self._records: dict[str, dict[Platform, str]] = {}
        self._totals: dict[str, int] = {}

    async def get_record(self, user_id: str, platform: Platform) -> ProfileRecord | None:
        raw = self._records.get(user_id, {}).get(Platform(platform))
        return ProfileRecord.model_validate_json(raw) if raw else None

    async def save_record(self, record: ProfileRecord) -> None:
        # Stored serialized so callers never share a mutable record with the store.
        self._records.setdefault(record.user_id, {})[record.platform] = record.model_dump_json()

    async def list_records(self, user_id: str) -> list[ProfileRecord]:
        return [ProfileRecord.model_validate_json(raw) for raw in self._records.get(user_id, {}).values()]

    async def list_user_ids(self) -> list[str]:
        return list(self._records.keys() | self._totals.keys())

    async def get_total_score(self, user_id: str) -> int:
        return self._totals.get(user_id, 0)

    async def set_total_score(self, user_id: str, total: int) -> None:
        self._totals[user_id] = total


class RedisProfileStore(ProfileStore):
    """
    Redis-backed store.

    Layout (prefix from REDIS_KEY_PREFIX):
      {prefix}profiles:{user_id}          hash, field = platform, value = record JSON
      {prefix}users                       set of known user ids
      {prefix}user:{user_id}:total_score  integer string
    """

    def __init__(self, url: str | None = None, key_prefix: str | None = None, client: redis.Redis | None = None):
        self.url = url or settings.STORE_URL
        self.key_prefix = key_prefix if key_prefix is not None else settings.REDIS_KEY_PREFIX
        self._client = client

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            logger.info("Creating Redis client for RedisProfileStore")
            self._client = redis.from_url(
                self.url,
                decode_responses=True,
                encoding="utf-8",
                socket_connect_timeout=5,
                socket_timeout=5,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                health_check_interval=30,
                socket_keepalive=True,
            )
        return self._client

    def _profiles_key(self, user_id: str) -> str:
        return f"{self.key_prefix}profiles:{user_id}"

    def _users_key(self) -> str:
        return f"{self.key_prefix}users"

    def _total_key(self, user_id: str) -> str:
        return f"{self.key_prefix}user:{user_id}:total_score"

    @staticmethod
    def _decode(raw: str, user_id: str) -> ProfileRecord | None:
        try:
            return ProfileRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"[{user_id}] Skipping undecodable profile record: {e}")
            return None

    async def get_record(self, user_id: str, platform: Platform) -> ProfileRecord | None:
        client = await self._get_client()
        raw = await client.hget(self._profiles_key(user_id), Platform(platform).value)
        return self._decode(raw, user_id) if raw else None

    async def save_record(self, record: ProfileRecord) -> None:
        client = await self._get_client()
        try:
            async with client.pipeline(transaction=True) as pipe:
                pipe.hset(self._profiles_key(record.user_id), record.platform.value, record.model_dump_json())
                pipe.sadd(self._users_key(), record.user_id)
                await pipe.execute()
        except (redis.RedisError, OSError) as exc:
            logger.error(f"[{record.user_id}] Failed to save {record.platform.value} profile: {exc}")
            raise
        logger.debug(f"[{record.user_id}] Saved {record.platform.value} profile ({record.last_update_status.value})")

    async def list_records(self, user_id: str) -> list[ProfileRecord]:
        client = await self._get_client()
        raw_records = await client.hgetall(self._profiles_key(user_id))
        records = [self._decode(raw, user_id) for raw in raw_records.values()]
        return [record for record in records if record is not None]

    async def list_user_ids(self) -> list[str]:
        client = await self._get_client()
        return sorted(await client.smembers(self._users_key()))

    async def get_total_score(self, user_id: str) -> int:
        client = await self._get_client()
        raw = await client.get(self._total_key(user_id))
        return int(raw) if raw else 0

    async def set_total_score(self, user_id: str, total: int) -> None:
        client = await self._get_client()
        try:
            await client.set(self._total_key(user_id), str(total))
        except (redis.RedisError, OSError) as exc:
            logger.error(f"[{user_id}] Failed to write total score: {exc}")
            raise

    async def close(self) -> None:
        """Close and disconnect the Redis client (call on shutdown)."""
        if self._client is None:
            return
        try:
            await self._client.aclose()
            logger.info("RedisProfileStore client closed")
        except Exception as exc:
            logger.warning(f"Failed to close RedisProfileStore client: {exc}")
        finally:
            self._client = None


def build_profile_store(url: str | None = None) -> ProfileStore:
    url = url or settings.STORE_URL
    if url.startswith("memory://"):
        logger.warning("Using in-memory profile store; data will not survive a restart")
        return InMemoryProfileStore()
    return RedisProfileStore(url=url)
