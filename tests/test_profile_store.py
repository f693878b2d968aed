"""Tests for the profile store backends."""

from datetime import datetime, timezone

import pytest

from codescore.models.profile import Platform, ProfileRecord, UpdateStatus
from codescore.services.profile_store import InMemoryProfileStore, RedisProfileStore, build_profile_store


class _FakePipeline:
    def __init__(self, client: "FakeRedisClient"):
        self.client = client
        self.queued = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def hset(self, *args):
        self.queued.append(("hset", args))
        return self

    def sadd(self, *args):
        self.queued.append(("sadd", args))
        return self

    async def execute(self):
        results = []
        for name, args in self.queued:
            results.append(await getattr(self.client, name)(*args))
        self.queued = []
        return results


class FakeRedisClient:
    """Just enough of redis.asyncio.Redis for RedisProfileStore."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.sets: dict[str, set[str]] = {}
        self.strings: dict[str, str] = {}
        self.closed = False

    def pipeline(self, transaction: bool = True):
        return _FakePipeline(self)

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def sadd(self, key, member):
        self.sets.setdefault(key, set()).add(member)
        return 1

    async def smembers(self, key):
        return set(self.sets.get(key, set()))

    async def get(self, key):
        return self.strings.get(key)

    async def set(self, key, value):
        self.strings[key] = value
        return True

    async def aclose(self):
        self.closed = True


def make_record(user_id="u1", platform=Platform.CODECHEF, score=9580) -> ProfileRecord:
    return ProfileRecord(
        user_id=user_id,
        platform=platform,
        username="chef",
        score=score,
        problems_solved=40,
        rating=1500,
        max_rating=1650,
        rank="4321",
        stars=3,
        contest_count=10,
        last_updated=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        last_update_status=UpdateStatus.SUCCESS,
        update_attempts=2,
    )


@pytest.fixture(params=["memory", "redis"])
def any_store(request):
    if request.param == "memory":
        return InMemoryProfileStore()
    return RedisProfileStore(key_prefix="test:", client=FakeRedisClient())


class TestStoreContract:
    async def test_round_trip(self, any_store):
        record = make_record()
        await any_store.save_record(record)

        loaded = await any_store.get_record("u1", Platform.CODECHEF)

        assert loaded == record
        assert loaded.username == "chef"
        assert loaded.score == 9580
        assert loaded.last_update_status == UpdateStatus.SUCCESS

    async def test_save_is_create_or_update(self, any_store):
        await any_store.save_record(make_record(score=10))
        await any_store.save_record(make_record(score=20))

        records = await any_store.list_records("u1")

        assert len(records) == 1
        assert records[0].score == 20

    async def test_records_are_scoped_per_user(self, any_store):
        await any_store.save_record(make_record("u1", Platform.CODECHEF))
        await any_store.save_record(make_record("u1", Platform.LEETCODE, score=850))
        await any_store.save_record(make_record("u2", Platform.LEETCODE, score=100))

        assert {r.platform for r in await any_store.list_records("u1")} == {Platform.CODECHEF, Platform.LEETCODE}
        assert [r.score for r in await any_store.list_records("u2")] == [100]
        assert await any_store.get_record("u2", Platform.CODECHEF) is None
        assert sorted(await any_store.list_user_ids()) == ["u1", "u2"]

    async def test_total_score(self, any_store):
        assert await any_store.get_total_score("u1") == 0
        await any_store.set_total_score("u1", 1234)
        assert await any_store.get_total_score("u1") == 1234

    async def test_returned_records_are_detached(self, any_store):
        await any_store.save_record(make_record())
        loaded = await any_store.get_record("u1", Platform.CODECHEF)
        loaded.score = 0
        assert (await any_store.get_record("u1", Platform.CODECHEF)).score == 9580


class TestRedisProfileStore:
    async def test_key_layout(self):
        client = FakeRedisClient()
        store = RedisProfileStore(key_prefix="cs:", client=client)

        await store.save_record(make_record())
        await store.set_total_score("u1", 9580)

        assert set(client.hashes["cs:profiles:u1"]) == {"codechef"}
        assert client.sets["cs:users"] == {"u1"}
        assert client.strings["cs:user:u1:total_score"] == "9580"

    async def test_undecodable_records_are_skipped(self):
        client = FakeRedisClient()
        store = RedisProfileStore(key_prefix="cs:", client=client)
        await store.save_record(make_record())
        client.hashes["cs:profiles:u1"]["leetcode"] = "{not json"

        records = await store.list_records("u1")

        assert [r.platform for r in records] == [Platform.CODECHEF]

    async def test_close(self):
        client = FakeRedisClient()
        store = RedisProfileStore(client=client)
        await store.close()
        assert client.closed


def test_build_profile_store_selects_backend():
    assert isinstance(build_profile_store("memory://"), InMemoryProfileStore)
    assert isinstance(build_profile_store("redis://localhost:6379/0"), RedisProfileStore)
