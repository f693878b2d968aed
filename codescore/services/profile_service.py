from loguru import logger

from codescore.core.errors import AdapterError, ParseFailureError
from codescore.models.profile import (
    AggregationReport,
    Platform,
    ProfileRecord,
    ProfileSnapshot,
    RefreshReport,
    RefreshResult,
    UpdateStatus,
    UserProfiles,
)
from codescore.services.platforms.dispatcher import PlatformDispatcher, resolve_platform
from codescore.services.profile_store import ProfileStore, build_profile_store
from codescore.services.rate_limiter import PlatformRateLimiter
from codescore.services.score_aggregator import ScoreAggregator


class ProfileService:
    """
    Entry point for profile verification, refresh and score aggregation.

    Collaborators are passed in; nothing here is a process-wide singleton. The
    aggregator is called explicitly at the end of every write path.
    """

    def __init__(
        self,
        store: ProfileStore,
        dispatcher: PlatformDispatcher,
        rate_limiter: PlatformRateLimiter,
        aggregator: ScoreAggregator,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.rate_limiter = rate_limiter
        self.aggregator = aggregator

    async def verify_and_store_profile(self, user_id: str, platform: Platform | str, username: str) -> ProfileRecord:
        """
        Fetch a username from its platform and store it for the user.

        Raises the AdapterError on failure. A pre-existing record is moved to the
        error state with its numbers untouched; no record is created for a
        username that failed verification.
        """
        platform = resolve_platform(platform)
        username = (username or "").strip()
        if not username:
            raise ValueError("Username is required")

        existing = await self.store.get_record(user_id, platform)
        try:
            snapshot = await self.dispatcher.dispatch(platform, username)
        except AdapterError as e:
            if existing is not None:
                existing.record_attempt()
                existing.mark_error(e)
                await self.store.save_record(existing)
                await self.aggregator.recompute_user_score(user_id)
            raise

        record = existing or ProfileRecord(user_id=user_id, platform=platform, username=username)
        record.record_attempt()
        record.apply_snapshot(snapshot)
        await self.store.save_record(record)
        total = await self.aggregator.recompute_user_score(user_id)
        action = "updated" if existing else "created"
        logger.info(f"[{user_id}] {platform.value} profile {action} for {username}: score={record.score}, total={total}")
        return record

    async def refresh_all_profiles(self, user_id: str) -> RefreshReport:
        """
        Refresh every stored profile of a user, one platform at a time.

        A failure on one platform is recorded against that platform only; the
        rest are still attempted and the total is recomputed once at the end.
        """
        records = await self.store.list_records(user_id)
        results = []
        for record in records:
            results.append(await self._refresh_record(record))

        total = await self.aggregator.recompute_user_score(user_id)
        failed = sum(1 for r in results if r.status == UpdateStatus.ERROR)
        logger.info(f"[{user_id}] Refreshed {len(results)} profiles ({failed} failed), total score {total}")
        return RefreshReport(user_id=user_id, results=results, total_score=total)

    async def _refresh_record(self, record: ProfileRecord) -> RefreshResult:
        snapshot: ProfileSnapshot | None = None
        error: AdapterError | None = None
        try:
            self.rate_limiter.acquire(record.platform)
            snapshot = await self.dispatcher.dispatch(record.platform, record.username)
        except AdapterError as e:
            error = e
        except Exception as e:
            logger.exception(f"[{record.user_id}] Unclassified {record.platform.value} failure for {record.username}")
            error = ParseFailureError(
                f"Unexpected {record.platform.value} failure: {e!r}", record.platform.value, record.username
            )

        record.record_attempt()
        if snapshot is not None:
            record.apply_snapshot(snapshot)
        else:
            record.mark_error(error)

        try:
            await self.store.save_record(record)
        except Exception as e:
            logger.exception(f"[{record.user_id}] Could not persist {record.platform.value} refresh: {e}")
            return RefreshResult(
                platform=record.platform,
                username=record.username,
                status=UpdateStatus.ERROR,
                error=f"Failed to save profile: {e}",
                last_updated=record.last_updated,
            )

        return RefreshResult(
            platform=record.platform,
            username=record.username,
            status=record.last_update_status,
            snapshot=snapshot,
            error=record.last_update_error,
            error_kind=record.last_error_kind,
            last_updated=record.last_updated,
        )

    async def get_profiles(self, user_id: str) -> UserProfiles:
        records = await self.store.list_records(user_id)
        records.sort(key=lambda r: list(Platform).index(r.platform))
        total = await self.store.get_total_score(user_id)
        return UserProfiles(user_id=user_id, profiles=records, total_score=total)

    async def recompute_all_user_scores(self) -> AggregationReport:
        return await self.aggregator.recompute_all_user_scores()

    async def close(self) -> None:
        await self.aggregator.stop_periodic()
        await self.dispatcher.close()
        await self.store.close()


def build_profile_service(store_url: str | None = None) -> ProfileService:
    """Wire the default collaborators from settings."""
    store = build_profile_store(store_url)
    return ProfileService(
        store=store,
        dispatcher=PlatformDispatcher(),
        rate_limiter=PlatformRateLimiter(),
        aggregator=ScoreAggregator(store),
    )
