import asyncio

from loguru import logger

from codescore.core.config import settings
from codescore.models.profile import AggregationReport
from codescore.services.profile_store import ProfileStore


class ScoreAggregator:
    """
    Recomputes a user's total score from their stored profile records.

    The total is always rebuilt from scratch as the sum of record scores,
    whatever each record's last update status is; a record in error still
    carries its last good score.
    """

    def __init__(self, store: ProfileStore, concurrency: int | None = None, timeout: float | None = None):
        self.store = store
        self.concurrency = concurrency or settings.AGGREGATION_CONCURRENCY
        self.timeout = timeout or settings.AGGREGATION_TIMEOUT_SECONDS
        self._periodic_task: asyncio.Task | None = None

    async def recompute_user_score(self, user_id: str) -> int:
        records = await self.store.list_records(user_id)
        total = sum(record.score or 0 for record in records)
        await self.store.set_total_score(user_id, total)
        logger.debug(f"[{user_id}] Total score recomputed over {len(records)} profiles: {total}")
        return total

    async def recompute_all_user_scores(self) -> AggregationReport:
        """
        Recompute every known user's total concurrently.

        One user's failure or timeout is recorded in the report and never stops
        the others.
        """
        user_ids = await self.store.list_user_ids()
        semaphore = asyncio.Semaphore(self.concurrency)
        report = AggregationReport()

        async def _recompute(user_id: str) -> None:
            async with semaphore:
                try:
                    report.totals[user_id] = await asyncio.wait_for(
                        self.recompute_user_score(user_id), timeout=self.timeout
                    )
                except asyncio.TimeoutError:
                    logger.warning(f"[{user_id}] Score recomputation timed out after {self.timeout}s")
                    report.failures[user_id] = f"timed out after {self.timeout}s"
                except Exception as e:
                    logger.exception(f"[{user_id}] Score recomputation failed: {e}")
                    report.failures[user_id] = str(e) or type(e).__name__

        await asyncio.gather(*(_recompute(user_id) for user_id in user_ids))
        logger.info(
            f"Recomputed scores for {len(report.totals)}/{len(user_ids)} users ({len(report.failures)} failures)"
        )
        return report

    def start_periodic(self, interval_seconds: int | None = None) -> None:
        """Run recompute_all_user_scores in the background every interval."""
        if self._periodic_task is not None and not self._periodic_task.done():
            logger.debug("Periodic score recomputation already running")
            return
        interval = interval_seconds or settings.SCORE_RECOMPUTE_INTERVAL_SECONDS
        self._periodic_task = asyncio.create_task(self._run_periodic(interval))
        logger.info(f"Periodic score recomputation scheduled every {interval} seconds")

    async def _run_periodic(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.recompute_all_user_scores()
            except Exception as e:
                logger.exception(f"Periodic score recomputation failed: {e}")

    async def stop_periodic(self) -> None:
        task, self._periodic_task = self._periodic_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
