import pytest

from fastapi_restkit.backends.file import FileCache
from fastapi_restkit.backends.memory import MemoryCache


class FakeClock:
    """Controllable epoch clock for expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def file_cache(tmp_path, clock: FakeClock) -> FileCache:
    return FileCache(tmp_path / "cache", default_ttl=60, clock=clock)


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(default_ttl=60, clock=clock)
