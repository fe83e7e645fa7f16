from kostfinder.services.cache import TTLCache


def test_get_returns_fresh_payload(clock) -> None:
    cache = TTLCache(ttl_seconds=300, clock=clock)
    cache.set("mamikos-a", ["listing"])

    clock.advance(299)

    assert cache.get("mamikos-a") == ["listing"]


def test_stale_entry_is_dropped_on_read(clock) -> None:
    cache = TTLCache(ttl_seconds=300, clock=clock)
    cache.set("mamikos-a", ["listing"])

    clock.advance(300)

    assert cache.get("mamikos-a") is None
    assert "mamikos-a" not in cache
    assert len(cache) == 0


def test_set_overwrites_and_restarts_the_window(clock) -> None:
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("key", 1)
    clock.advance(8)
    cache.set("key", 2)
    clock.advance(8)

    assert cache.get("key") == 2


def test_least_recently_used_entry_is_evicted(clock) -> None:
    cache = TTLCache(ttl_seconds=300, max_entries=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)

    assert "b" not in cache
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_clear_empties_the_cache() -> None:
    cache = TTLCache()
    cache.set("a", 1)

    cache.clear()

    assert len(cache) == 0
