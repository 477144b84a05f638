"""
Tests for settings validation.
"""

import pytest

from cortex_cache.config import Settings, get_settings


def test_defaults():
    settings = Settings()
    assert settings.base_path == "cortex/entities"
    assert settings.compression in ("gzip", "none")
    assert settings.cache_size >= 1


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


@pytest.mark.parametrize(
    "overrides",
    [
        {"backend": "s3"},
        {"compression": "brotli"},
        {"cache_size": 0},
        {"avg_entity_bytes": 0},
    ],
)
def test_invalid_settings(overrides):
    with pytest.raises(ValueError):
        Settings(**overrides)
