import pytest

from factories import ControlledFetcher, FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def controlled_fetcher() -> ControlledFetcher:
    return ControlledFetcher()
