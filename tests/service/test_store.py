"""Tests for the in-memory snapshot store."""

from battleships.service.store import InMemorySessionStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_get_returns_stored_blob() -> None:
    store = InMemorySessionStore(clock=FakeClock())
    assert store.get("k") is None
    store.set("k", "blob", ttl_seconds=10)
    assert store.get("k") == "blob"
    assert len(store) == 1


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    store = InMemorySessionStore(clock=clock)
    store.set("k", "blob", ttl_seconds=10)
    clock.now = 10
    assert store.get("k") is None
    assert len(store) == 0


def test_reads_slide_the_expiry() -> None:
    clock = FakeClock()
    store = InMemorySessionStore(clock=clock)
    store.set("k", "blob", ttl_seconds=10)
    clock.now = 8
    assert store.get("k") == "blob"
    clock.now = 16
    assert store.get("k") == "blob"
    clock.now = 27
    assert store.get("k") is None


def test_purge_and_delete() -> None:
    clock = FakeClock()
    store = InMemorySessionStore(clock=clock)
    store.set("old", "a", ttl_seconds=1)
    store.set("new", "b", ttl_seconds=100)
    store.set("gone", "c", ttl_seconds=100)
    store.delete("gone")
    clock.now = 5
    assert store.purge() == 1
    assert store.get("new") == "b"
    assert len(store) == 1
