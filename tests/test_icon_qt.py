from pathlib import Path

from PyQt6 import QtWidgets

from conftest import Clock, MemoryStore
from deck_core.coordinator import DeckCoordinator
from deck_core.icon_cache import IconCache
from deck_core.icon_janitor import IconCacheJanitor
from deck_core.icon_resolver import QtIconResolver
from runtime_bus import RuntimeBus, topics

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


_APP = None


def _app() -> QtWidgets.QApplication:
    # Keep a module-level reference so the QApplication is not garbage-collected
    # between the call and the test body.
    global _APP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _APP = app
    return app


def test_resolver_renders_png_or_reports_no_icon(tmp_path: Path) -> None:
    _app()
    target = tmp_path / "tool.exe"
    target.write_bytes(b"MZ")
    data = QtIconResolver(32)(str(target))
    assert data is None or data.startswith(PNG_SIGNATURE)


def test_janitor_cleans_over_quota_cache(tmp_path: Path) -> None:
    _app()
    cache = IconCache(tmp_path / "icons", max_bytes=1000, clock=Clock())
    cache.put("/apps/a.exe", b"x" * 600)
    cache.max_bytes = 500
    bus = RuntimeBus()
    published = []
    bus.subscribe(topics.ICON_CACHE_CLEANUP_COMPLETED, lambda env: published.append(env.get("removed")))
    janitor = IconCacheJanitor(cache, interval_ms=60_000, bus=bus)
    emitted = []
    janitor.cleanup_completed.connect(emitted.append)

    report = janitor.run_once()
    assert report["removed"] == ["/apps/a.exe"]
    assert published == [["/apps/a.exe"]]
    assert len(emitted) == 1

    janitor.start()
    assert janitor.is_active()
    assert janitor.interval_ms == 60_000
    janitor.stop()
    assert not janitor.is_active()


def test_coordinator_builds_janitor_only_with_cache(tmp_path: Path) -> None:
    _app()
    assert DeckCoordinator(MemoryStore()).create_icon_janitor() is None
    deck = DeckCoordinator(MemoryStore(), icon_cache=IconCache(tmp_path / "icons"))
    janitor = deck.create_icon_janitor()
    assert janitor.interval_ms == 10 * 60 * 1000
