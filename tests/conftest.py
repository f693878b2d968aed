import pytest

from codescore.services.profile_store import InMemoryProfileStore


@pytest.fixture
def store() -> InMemoryProfileStore:
    return InMemoryProfileStore()
