from loguru import logger

from codescore.core.errors import ParseFailureError, ProfileNotFoundError
from codescore.models.profile import Platform, ProfileSnapshot
from codescore.services import scoring
from codescore.services.platforms.base import PlatformAdapter

PROFILE_QUERY = """
query getUserProfile($username: String!) {
  matchedUser(username: $username) {
    submitStats {
      acSubmissionNum {
        difficulty
        count
        submissions
      }
    }
    profile {
      ranking
      reputation
      starRating
    }
  }
}
"""


class LeetCodeAdapter(PlatformAdapter):
    """Single GraphQL query for submission statistics and profile metadata."""

    platform = Platform.LEETCODE
    base_url = "https://leetcode.com"

    async def _fetch(self, username: str) -> ProfileSnapshot:
        response = await self.post(
            "/graphql",
            json={"query": PROFILE_QUERY, "variables": {"username": username}},
            headers={"Referer": f"https://leetcode.com/{username}/"},
        )
        if response.status_code == 404:
            raise ProfileNotFoundError(f"LeetCode user {username} not found", self.platform.value, username)

        payload = self.decode_json(response)
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or "matchedUser" not in data:
            raise ParseFailureError(
                f"LeetCode response for {username} has no data.matchedUser field", self.platform.value, username
            )

        user = data["matchedUser"]
        if not user:
            raise ProfileNotFoundError(f"LeetCode user {username} not found", self.platform.value, username)

        try:
            buckets = user["submitStats"]["acSubmissionNum"]
            profile = user["profile"] or {}
        except (KeyError, TypeError) as e:
            raise ParseFailureError(
                f"LeetCode profile for {username} is missing {e}", self.platform.value, username
            ) from e

        solved = scoring.leetcode_total_accepted(buckets)
        rating = scoring.leetcode_rating(profile)
        logger.debug(f"[leetcode] {username}: solved={solved} rating={rating}")

        return ProfileSnapshot(
            platform=self.platform,
            username=username,
            score=scoring.leetcode_score(solved),
            problems_solved=solved,
            rating=rating,
            max_rating=rating,
            rank=profile.get("ranking") or 0,
        )
