import asyncio
from typing import Any

from loguru import logger

from codescore.core.errors import AdapterError, ParseFailureError, ProfileNotFoundError
from codescore.models.profile import Platform, ProfileSnapshot
from codescore.services import scoring
from codescore.services.platforms.base import PlatformAdapter


class HackerRankAdapter(PlatformAdapter):
    """
    Chained REST calls: a profile-detail call proves the hacker exists, then the
    scores and submission-history endpoints are fetched best effort. Either
    auxiliary call failing degrades to an empty result for that piece.
    """

    platform = Platform.HACKERRANK
    base_url = "https://www.hackerrank.com/rest"

    async def _profile(self, username: str) -> dict[str, Any]:
        response = await self.get(f"/contests/master/hackers/{username}")
        if response.is_error:
            raise ProfileNotFoundError(
                f"HackerRank user {username} not found (HTTP {response.status_code})", self.platform.value, username
            )
        payload = self.decode_json(response)
        model = payload.get("model") if isinstance(payload, dict) else None
        if not model:
            raise ProfileNotFoundError(f"HackerRank user {username} not found", self.platform.value, username)
        return model

    async def _auxiliary(self, url: str, username: str, expected: type, default: Any) -> Any:
        try:
            response = await self.get(url)
            if response.is_error:
                logger.info(f"[hackerrank] {username}: {url} returned {response.status_code}, using empty result")
                return default
            payload = self.decode_json(response)
        except AdapterError as e:
            logger.info(f"[hackerrank] {username}: {url} unavailable ({e}), using empty result")
            return default
        if not isinstance(payload, expected):
            logger.info(f"[hackerrank] {username}: {url} returned {type(payload).__name__}, using empty result")
            return default
        return payload

    async def _fetch(self, username: str) -> ProfileSnapshot:
        profile = await self._profile(username)

        tracks, histories = await asyncio.gather(
            self._auxiliary(f"/hackers/{username}/scores_elo", username, list, []),
            self._auxiliary(f"/hackers/{username}/submission_histories", username, dict, {}),
        )

        try:
            score, best_rank = scoring.hackerrank_practice_totals(tracks)
            solved = scoring.hackerrank_problem_count(histories)
        except (TypeError, ValueError, AttributeError) as e:
            raise ParseFailureError(
                f"HackerRank score data for {username} is malformed: {e}", self.platform.value, username
            ) from e

        logger.debug(f"[hackerrank] {username}: score={score} rank={best_rank} solved={solved}")
        return ProfileSnapshot(
            platform=self.platform,
            username=username,
            name=profile.get("name") or username,
            score=score,
            problems_solved=solved,
            rating=score,
            max_rating=score,
            rank=best_rank,
        )
