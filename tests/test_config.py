# tests/test_config.py
"""Tests for environment-driven settings."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from config import Settings


def test_settings_read_aliased_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://docs.internal:9000")
    monkeypatch.setenv("MINIMAP_HEIGHT", "8")

    settings = Settings(_env_file=None)

    assert str(settings.api_base_url).startswith("http://docs.internal:9000")
    assert settings.minimap_height == 8
    assert settings.jump_context_lines == 3


@pytest.mark.parametrize("value, expected", [("debug", logging.DEBUG), ("nonsense", logging.INFO)])
def test_logging_level_resolution(value: str, expected: int) -> None:
    assert Settings(_env_file=None, log_level=value).logging_level == expected


def test_timeout_must_be_at_least_one_second() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, request_timeout_seconds=0.5)
