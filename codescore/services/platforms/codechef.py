import re

from bs4 import BeautifulSoup
from loguru import logger

from codescore.core.errors import ParseFailureError, ProfileNotFoundError, TransientError
from codescore.models.profile import Platform, ProfileSnapshot
from codescore.services import scoring
from codescore.services.platforms.base import PlatformAdapter

_DIGITS = re.compile(r"\d+")
_SOLVED_HEADING = re.compile(r"solved\D*(\d+)", re.IGNORECASE)


def _first_int(text: str | None) -> int | None:
    if not text:
        return None
    match = _DIGITS.search(text)
    return int(match.group()) if match else None


class CodeChefAdapter(PlatformAdapter):
    """
    Scrapes the public profile page; CodeChef has no stable public API.

    Fields are located by structural position in the page. A page that renders
    but carries no rating, no solved count and no contest history is treated as
    a missing profile rather than a zero-score one.
    """

    platform = Platform.CODECHEF
    base_url = "https://www.codechef.com"
    accept = "text/html,application/xhtml+xml"

    async def _fetch(self, username: str) -> ProfileSnapshot:
        response = await self.get(f"/users/{username}")
        if response.status_code == 404:
            raise ProfileNotFoundError(f"CodeChef user {username} not found", self.platform.value, username)
        if response.status_code == 403:
            raise TransientError(
                f"CodeChef refused the profile page for {username} (HTTP 403)", self.platform.value, username
            )
        if response.status_code >= 400:
            raise ParseFailureError(
                f"CodeChef profile page for {username} returned HTTP {response.status_code}",
                self.platform.value,
                username,
            )
        return self.parse_profile(username, response.text)

    def parse_profile(self, username: str, html: str) -> ProfileSnapshot:
        soup = BeautifulSoup(html, "html.parser")

        rating = 0
        rating_node = soup.select_one(".rating-number")
        if rating_node is not None:
            parsed = _first_int(rating_node.get_text(strip=True))
            if parsed is None:
                logger.error(f"[codechef] {username}: rating node present but unreadable: {rating_node!r}")
                raise ParseFailureError(
                    f"CodeChef rating for {username} could not be read", self.platform.value, username
                )
            rating = parsed

        max_rating_node = soup.select_one(".rating-header small")
        max_rating = _first_int(max_rating_node.get_text()) if max_rating_node else None

        fully_solved = self._fully_solved(soup) or 0
        contest_count = len(soup.select(".rating-table tbody tr"))

        # Only evaluated once all three signals have been read.
        if rating == 0 and fully_solved == 0 and contest_count == 0:
            raise ProfileNotFoundError(
                f"CodeChef profile for {username} has no rating, solved count or contest history",
                self.platform.value,
                username,
            )

        ranks = [node.get_text(strip=True) for node in soup.select(".rating-ranks strong")]
        global_rank = _first_int(ranks[0]) if ranks else None
        country_rank = _first_int(ranks[1]) if len(ranks) > 1 else None

        logger.debug(
            f"[codechef] {username}: rating={rating} solved={fully_solved} contests={contest_count}"
        )
        return ProfileSnapshot(
            platform=self.platform,
            username=username,
            score=scoring.codechef_score(rating, fully_solved, contest_count),
            problems_solved=fully_solved,
            rating=rating,
            max_rating=max_rating or 0,
            rank=str(global_rank or 0),
            stars=scoring.codechef_stars(rating),
            contest_count=contest_count,
            country_rank=str(country_rank or 0),
        )

    @staticmethod
    def _fully_solved(soup: BeautifulSoup) -> int | None:
        section = soup.select_one(".rating-data-section")
        if section is None:
            return None
        strong = section.find("strong")
        if strong is not None:
            count = _first_int(strong.get_text())
            if count is not None:
                return count
        # Newer layouts print "Total Problems Solved: N" in a heading instead
        for heading in section.find_all(["h3", "h5"]):
            match = _SOLVED_HEADING.search(heading.get_text())
            if match:
                return int(match.group(1))
        return None
