import json
from pathlib import Path

from deck_core import settings


def test_defaults_without_overrides(data_dir: Path) -> None:
    resolved = settings.resolve_settings(data_dir)
    assert resolved["icon_cache_max_bytes"] == 50 * 1024 * 1024
    assert resolved["icon_cache_cleanup_interval_ms"] == 600000
    assert settings.config_path(resolved) == data_dir / "config.json"


def test_overrides_are_typed_and_unknown_keys_ignored(data_dir: Path) -> None:
    (data_dir / "settings.json").write_text(
        json.dumps({"icon_size_px": "32", "action_log_size": "lots", "mystery": 1, "config_file": "deck.json"}),
        encoding="utf-8",
    )
    resolved = settings.resolve_settings(data_dir)
    assert resolved["icon_size_px"] == 32
    assert resolved["action_log_size"] == 100
    assert "mystery" not in resolved
    assert settings.config_path(resolved) == data_dir / "deck.json"


def test_data_root_from_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv(settings.DATA_DIR_ENV, str(tmp_path))
    assert settings.get_data_root() == tmp_path
    assert settings.icon_cache_dir(settings.resolve_settings()) == tmp_path / "icon_cache"
