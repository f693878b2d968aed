import json
from collections.abc import Callable

import httpx

from codescore.core.errors import AdapterError
from codescore.models.profile import Platform, ProfileSnapshot
from codescore.services.platforms.base import PlatformAdapter
from codescore.services.platforms.dispatcher import PlatformDispatcher
from codescore.services.profile_service import ProfileService
from codescore.services.profile_store import InMemoryProfileStore
from codescore.services.rate_limiter import PlatformRateLimiter
from codescore.services.score_aggregator import ScoreAggregator


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload), headers={"Content-Type": "application/json"})


def mock_transport(routes: dict[str, Callable[[httpx.Request], httpx.Response] | httpx.Response]):
    """MockTransport dispatching on request path; unknown paths answer 599 so tests notice."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(599, text=f"unexpected path {request.url.path}")
        return route(request) if callable(route) else route

    return httpx.MockTransport(handler)


class StubAdapter(PlatformAdapter):
    """Adapter returning scripted outcomes; exceptions in the script are raised."""

    def __init__(self, platform: Platform, outcomes: list):
        self.platform = platform
        super().__init__(timeout=1.0)
        self.outcomes = list(outcomes)
        self.calls: list[str] = []

    async def _fetch(self, username: str) -> ProfileSnapshot:
        self.calls.append(username)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome.model_copy(update={"username": username})


def snapshot(platform: Platform, score: int, **fields) -> ProfileSnapshot:
    fields.setdefault("problems_solved", score // 10)
    fields.setdefault("rating", 1500)
    fields.setdefault("max_rating", 1600)
    fields.setdefault("rank", 42)
    return ProfileSnapshot(platform=platform, username="placeholder", score=score, **fields)


def build_service(
    outcomes: dict[Platform, list[ProfileSnapshot | AdapterError]],
    store: InMemoryProfileStore | None = None,
    rate_limits: dict[str, int] | None = None,
) -> tuple[ProfileService, dict[Platform, StubAdapter]]:
    store = store or InMemoryProfileStore()
    adapters = {platform: StubAdapter(platform, script) for platform, script in outcomes.items()}
    service = ProfileService(
        store=store,
        dispatcher=PlatformDispatcher(adapters=adapters),
        rate_limiter=PlatformRateLimiter(limits=rate_limits or {}, window_seconds=60),
        aggregator=ScoreAggregator(store, concurrency=4, timeout=5),
    )
    return service, adapters
