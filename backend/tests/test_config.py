from __future__ import annotations

from app.core.config import get_settings


def test_numbering_settings_from_env(settings, monkeypatch) -> None:
    monkeypatch.setenv("NUMBERING_DUPLICATE_CHECK", "true")
    monkeypatch.setenv("NUMBERING_DUPLICATE_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("NUMBERING_GENERATION_TIMEOUT_SECONDS", "")
    monkeypatch.setenv("CORS_ORIGINS", " https://a.example , ,https://b.example")
    get_settings.cache_clear()

    loaded = get_settings()

    assert loaded.numbering_duplicate_check is True
    assert loaded.numbering_duplicate_max_attempts == 4
    assert loaded.numbering_generation_timeout_seconds is None
    assert loaded.cors_origin_list == ["https://a.example", "https://b.example"]


def test_numbering_defaults(settings) -> None:
    assert settings.numbering_duplicate_check is False
    assert settings.numbering_duplicate_max_attempts == 10
    assert settings.numbering_seed_file is None
