import time

from bizsubs.core.cache import (
    CLIENTS,
    DASHBOARD,
    LIFETIME_DEALS,
    PROJECTS,
    REPORTS,
    SUBSCRIPTIONS,
    QueryCache,
    freeze,
)

FAMILIES = (SUBSCRIPTIONS, LIFETIME_DEALS, CLIENTS, PROJECTS, DASHBOARD, REPORTS)


def _fill(cache: QueryCache, user_id: str) -> None:
    for family in FAMILIES:
        cache.set((user_id, family, "list"), [family])


def test_get_or_load_only_loads_once() -> None:
    cache = QueryCache(ttl_seconds=60)
    calls = {"n": 0}

    def loader():
        calls["n"] += 1
        return ["row"]

    assert cache.get_or_load(("u", CLIENTS, "list"), loader) == ["row"]
    assert cache.get_or_load(("u", CLIENTS, "list"), loader) == ["row"]
    assert calls["n"] == 1


def test_entries_expire() -> None:
    cache = QueryCache(ttl_seconds=60)
    cache.set(("u", CLIENTS), "stale", ttl=0)
    time.sleep(0.001)
    assert cache.get(("u", CLIENTS)) is None


def test_invalidate_by_prefix() -> None:
    cache = QueryCache()
    cache.set(("u", CLIENTS, "list"), 1)
    cache.set(("u", CLIENTS, "costs"), 2)
    cache.set(("u", PROJECTS, "list"), 3)
    assert cache.invalidate(("u", CLIENTS)) == 2
    assert cache.get(("u", PROJECTS, "list")) == 3


def test_change_fans_out_to_every_family_of_that_user_only() -> None:
    for source in ("subscription", "lifetime-deal", "client", "project"):
        cache = QueryCache()
        _fill(cache, "u1")
        _fill(cache, "u2")
        cache.invalidate_after_change("u1", source)
        assert all(cache.get(("u1", family, "list")) is None for family in FAMILIES), source
        assert all(cache.get(("u2", family, "list")) == [family] for family in FAMILIES), source


def test_full_cache_skips_new_entries() -> None:
    cache = QueryCache(max_entries=1)
    cache.set(("a",), 1)
    cache.set(("b",), 2)
    assert cache.get(("a",)) == 1
    assert cache.get(("b",)) is None
    assert len(cache) == 1


def test_freeze_is_order_independent_and_drops_none() -> None:
    assert freeze({"b": 2, "a": "x", "c": None}) == freeze({"a": "x", "b": 2})
    assert freeze(None) == ()


def test_profile_change_refreshes_derived_numbers_only() -> None:
    cache = QueryCache()
    _fill(cache, "u1")
    cache.invalidate_after_change("u1", "profile")
    assert cache.get(("u1", DASHBOARD, "list")) is None
    assert cache.get(("u1", REPORTS, "list")) is None
    for family in (SUBSCRIPTIONS, LIFETIME_DEALS, CLIENTS, PROJECTS):
        assert cache.get(("u1", family, "list")) == [family]
