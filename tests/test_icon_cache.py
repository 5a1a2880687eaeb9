from pathlib import Path

from conftest import Clock
from deck_core.icon_cache import IconCache


def _cache(tmp_path: Path, clock: Clock, max_bytes: int = 1000, resolver=None) -> IconCache:
    return IconCache(tmp_path / "icons", max_bytes=max_bytes, resolver=resolver, clock=clock)


def test_put_and_get_update_access_time(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock)
    entry = cache.put("/apps/a.exe", b"x" * 10)
    assert entry.file_path.read_bytes() == b"x" * 10
    clock.advance(5)
    assert cache.get("/apps/a.exe").last_access == clock.now
    assert cache.read_bytes("/apps/a.exe") == b"x" * 10


def test_insert_past_quota_evicts_lru_first_down_to_target(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock)
    for name in ("a", "b", "c", "d"):
        cache.put(f"/apps/{name}.exe", b"x" * 250)
        clock.advance()
    cache.get("/apps/a.exe")
    clock.advance()
    cache.put("/apps/e.exe", b"x" * 250)
    assert cache.usage_bytes <= 800
    assert "/apps/b.exe" not in cache
    assert "/apps/c.exe" not in cache
    assert "/apps/a.exe" in cache
    assert "/apps/e.exe" in cache
    assert cache.keys()[-1] == "/apps/e.exe"


def test_entry_larger_than_quota_is_not_cached(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock, max_bytes=100)
    assert cache.put("/apps/huge.exe", b"x" * 101) is None
    assert cache.usage_bytes == 0


def test_entry_that_cannot_fit_under_target_is_rejected(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock, max_bytes=100)
    cache.put("/apps/a.exe", b"x" * 20)
    clock.advance()
    assert cache.put("/apps/big.exe", b"x" * 85) is None
    assert "/apps/big.exe" not in cache
    assert cache.keys() == ["/apps/a.exe"]
    assert cache.usage_bytes <= cache.target_bytes


def test_entry_at_target_evicts_older_entries(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock, max_bytes=100)
    cache.put("/apps/a.exe", b"x" * 30)
    clock.advance()
    assert cache.put("/apps/b.exe", b"x" * 80) is not None
    assert cache.keys() == ["/apps/b.exe"]
    assert cache.usage_bytes == 80


def test_failed_extraction_is_not_cached(tmp_path: Path, clock: Clock) -> None:
    calls = []

    def resolver(path: str):
        calls.append(path)
        return None

    cache = _cache(tmp_path, clock, resolver=resolver)
    assert cache.get_or_extract("/apps/a.exe") is None
    assert cache.get_or_extract("/apps/a.exe") is None
    assert len(calls) == 2
    assert len(cache) == 0


def test_extraction_result_is_reused(tmp_path: Path, clock: Clock) -> None:
    calls = []

    def resolver(path: str):
        calls.append(path)
        return b"png"

    cache = _cache(tmp_path, clock, resolver=resolver)
    first = cache.get_or_extract("/apps/a.exe")
    second = cache.get_or_extract("/apps/a.exe")
    assert first.file_path == second.file_path
    assert calls == ["/apps/a.exe"]


def test_index_survives_restart(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock)
    cache.put("/apps/a.exe", b"a" * 10)
    clock.advance()
    cache.put("/apps/b.exe", b"b" * 20)
    reopened = _cache(tmp_path, clock)
    assert reopened.keys() == ["/apps/a.exe", "/apps/b.exe"]
    assert reopened.usage_bytes == 30


def test_cleanup_only_runs_over_quota(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock)
    cache.put("/apps/a.exe", b"x" * 500)
    assert cache.cleanup()["removed"] == []
    cache.max_bytes = 400
    report = cache.cleanup()
    assert report["removed"] == ["/apps/a.exe"]
    assert cache.usage_bytes == 0


def test_invalidate_clear_and_stats(tmp_path: Path, clock: Clock) -> None:
    cache = _cache(tmp_path, clock)
    entry = cache.put("/apps/a.exe", b"x" * 10)
    cache.put("/apps/b.exe", b"x" * 10)
    assert cache.invalidate("/apps/a.exe")
    assert not entry.file_path.exists()
    assert not cache.invalidate("/apps/a.exe")
    assert cache.stats()["cached_icons"] == 1
    cache.clear()
    assert cache.stats()["cache_size_bytes"] == 0
