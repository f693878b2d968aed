import asyncio
from typing import Any

from loguru import logger

from codescore.core.errors import ParseFailureError, ProfileNotFoundError
from codescore.models.profile import Platform, ProfileSnapshot
from codescore.services import scoring
from codescore.services.platforms.base import PlatformAdapter


class CodeforcesAdapter(PlatformAdapter):
    """
    Two REST calls issued together: user.info and user.status.

    Both calls have to finish before the adapter returns. A non-OK status from
    user.info means the handle does not exist, whatever user.status said.
    """

    platform = Platform.CODEFORCES
    base_url = "https://codeforces.com/api"

    async def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        response = await self.get(f"/{method}", params=params)
        payload = self.decode_json(response)
        if not isinstance(payload, dict) or "status" not in payload:
            raise ParseFailureError(f"Codeforces {method} returned an unexpected body", self.platform.value)
        return payload

    async def _fetch(self, username: str) -> ProfileSnapshot:
        info, status = await asyncio.gather(
            self._call("user.info", {"handles": username}),
            self._call("user.status", {"handle": username}),
            return_exceptions=True,
        )

        if isinstance(info, BaseException):
            raise info
        if info["status"] != "OK":
            comment = info.get("comment") or "unknown handle"
            raise ProfileNotFoundError(
                f"Codeforces user {username} not found: {comment}", self.platform.value, username
            )
        if isinstance(status, BaseException):
            raise status
        if status["status"] != "OK":
            raise ParseFailureError(
                f"Codeforces user.status failed for {username}: {status.get('comment')}", self.platform.value, username
            )

        try:
            user = info["result"][0]
            submissions = status["result"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseFailureError(
                f"Codeforces payload for {username} is missing {e}", self.platform.value, username
            ) from e

        solved = scoring.codeforces_solved_problems(submissions)
        contests = scoring.codeforces_contests_as_contestant(submissions)
        rating = int(user.get("rating") or 0)
        logger.debug(f"[codeforces] {username}: solved={solved} rating={rating} contests={contests}")

        return ProfileSnapshot(
            platform=self.platform,
            username=username,
            score=scoring.codeforces_score(solved, rating, contests),
            problems_solved=solved,
            rating=rating,
            max_rating=int(user.get("maxRating") or 0),
            rank=user.get("rank") or "newbie",
        )
