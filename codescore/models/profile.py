from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from codescore.core.errors import AdapterError, ErrorKind


class Platform(str, Enum):
    LEETCODE = "leetcode"
    CODEFORCES = "codeforces"
    CODECHEF = "codechef"
    HACKERRANK = "hackerrank"


class UpdateStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileSnapshot(BaseModel):
    """Freshly fetched, normalized profile data for one (user, platform) pair."""

    platform: Platform
    username: str
    score: int = Field(default=0, ge=0)
    problems_solved: int = Field(default=0, ge=0)
    rating: int = 0
    max_rating: int = Field(default=0, ge=0)
    rank: str | int = 0
    # codechef only
    stars: int | None = Field(default=None, ge=1, le=7)
    contest_count: int | None = Field(default=None, ge=0)
    country_rank: str | None = None
    # hackerrank only
    name: str | None = None
    fetched_at: datetime = Field(default_factory=utcnow)


class ProfileRecord(BaseModel):
    """
    Persisted state for one (user_id, platform) pair.

    Transitions:
      pending -> success   whenever a fetch returns a snapshot
      *       -> error     whenever a fetch fails; snapshot fields are kept as-is
    update_attempts grows on every attempt and is never reset.
    """

    user_id: str
    platform: Platform
    username: str
    score: int = 0
    problems_solved: int = 0
    rating: int = 0
    max_rating: int = 0
    rank: str | int = "unrated"
    stars: int | None = None
    contest_count: int | None = None
    last_updated: datetime | None = None
    last_update_status: UpdateStatus = UpdateStatus.PENDING
    last_update_error: str | None = None
    last_error_kind: ErrorKind | None = None
    update_attempts: int = 0

    def record_attempt(self) -> None:
        self.update_attempts += 1

    def apply_snapshot(self, snapshot: ProfileSnapshot, now: datetime | None = None) -> None:
        self.username = snapshot.username
        self.score = snapshot.score
        self.problems_solved = snapshot.problems_solved
        self.rating = snapshot.rating
        self.max_rating = snapshot.max_rating
        self.rank = snapshot.rank
        if self.platform == Platform.CODECHEF:
            self.stars = snapshot.stars or 1
            self.contest_count = snapshot.contest_count or 0
        self.last_updated = now or utcnow()
        self.last_update_status = UpdateStatus.SUCCESS
        self.last_update_error = None
        self.last_error_kind = None

    def mark_error(self, error: AdapterError) -> None:
        # Last known good numbers stay put; only the status fields move.
        self.last_update_status = UpdateStatus.ERROR
        self.last_update_error = str(error)
        self.last_error_kind = error.kind


class RefreshResult(BaseModel):
    platform: Platform
    username: str
    status: UpdateStatus
    snapshot: ProfileSnapshot | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    last_updated: datetime | None = None


class RefreshReport(BaseModel):
    user_id: str
    results: list[RefreshResult] = Field(default_factory=list)
    total_score: int = 0

    @property
    def failed(self) -> list[RefreshResult]:
        return [r for r in self.results if r.status == UpdateStatus.ERROR]


class AggregationReport(BaseModel):
    totals: dict[str, int] = Field(default_factory=dict)
    failures: dict[str, str] = Field(default_factory=dict)


class UserProfiles(BaseModel):
    user_id: str
    profiles: list[ProfileRecord] = Field(default_factory=list)
    total_score: int = 0
