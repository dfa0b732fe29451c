from liquidnotes.search.cache import QueryCache
from tests.fakes import FakeClock


class CountingCompute:
    def __init__(self, result: list[str]) -> None:
        self.result = result
        self.calls = 0

    def __call__(self) -> list[str]:
        self.calls += 1
        return list(self.result)


def test_hit_within_throttle_window(fake_clock: FakeClock) -> None:
    """Test that a repeated query inside the window is served from the cache."""
    cache = QueryCache(clock=fake_clock)
    compute = CountingCompute(["a", "b"])

    assert cache.lookup_or_compute("budget", compute) == ["a", "b"]
    fake_clock.advance(0.4)
    assert cache.lookup_or_compute("budget", compute) == ["a", "b"]

    assert compute.calls == 1


def test_recompute_after_throttle_window(fake_clock: FakeClock) -> None:
    cache = QueryCache(clock=fake_clock)
    compute = CountingCompute(["a"])

    cache.lookup_or_compute("budget", compute)
    fake_clock.advance(0.5)
    compute.result = ["b"]

    assert cache.lookup_or_compute("budget", compute) == ["b"]
    assert compute.calls == 2


def test_refreshed_entry_restarts_window(fake_clock: FakeClock) -> None:
    cache = QueryCache(clock=fake_clock)
    compute = CountingCompute(["a"])

    cache.lookup_or_compute("budget", compute)
    fake_clock.advance(0.6)
    cache.lookup_or_compute("budget", compute)
    fake_clock.advance(0.3)
    cache.lookup_or_compute("budget", compute)

    assert compute.calls == 2


def test_keys_are_raw_query_strings(fake_clock: FakeClock) -> None:
    """Test that queries differing in case or whitespace are separate entries."""
    cache = QueryCache(clock=fake_clock)
    compute = CountingCompute(["a"])

    for query in ["budget", "Budget", " budget", "budget "]:
        cache.lookup_or_compute(query, compute)

    assert compute.calls == 4
    assert len(cache) == 4


def test_results_never_leak_between_queries(fake_clock: FakeClock) -> None:
    cache = QueryCache(clock=fake_clock)

    cache.lookup_or_compute("work", CountingCompute(["a"]))

    assert cache.lookup_or_compute("home", CountingCompute(["b"])) == ["b"]


def test_cache_clears_when_51st_query_is_inserted(fake_clock: FakeClock) -> None:
    """Test that a new key beyond 50 entries clears everything before it is stored."""
    cache = QueryCache(clock=fake_clock)

    for i in range(50):
        cache.lookup_or_compute(f"query {i}", CountingCompute([str(i)]))
    assert len(cache) == 50

    cache.lookup_or_compute("query 50", CountingCompute(["50"]))

    assert len(cache) == 1
    assert "query 50" in cache
    assert "query 0" not in cache


def test_refreshing_existing_key_at_capacity_keeps_entries(fake_clock: FakeClock) -> None:
    cache = QueryCache(clock=fake_clock)
    for i in range(50):
        cache.lookup_or_compute(f"query {i}", CountingCompute([str(i)]))

    fake_clock.advance(1.0)
    cache.lookup_or_compute("query 0", CountingCompute(["0"]))

    assert len(cache) == 50


def test_returned_list_is_a_copy(fake_clock: FakeClock) -> None:
    cache = QueryCache(clock=fake_clock)
    result = cache.lookup_or_compute("budget", CountingCompute(["a"]))
    result.append("mutated")

    assert cache.lookup_or_compute("budget", CountingCompute([])) == ["a"]


def test_clear(fake_clock: FakeClock) -> None:
    cache = QueryCache(clock=fake_clock)
    cache.lookup_or_compute("budget", CountingCompute(["a"]))

    cache.clear()

    assert len(cache) == 0
