"""Tests for environment-driven configuration helpers."""

import pytest

from vram_estimator import config


def test_get_env_present(monkeypatch):
    monkeypatch.setenv("VRAM_TEST_KEY", "value")
    assert config.get_env("VRAM_TEST_KEY") == "value"


def test_get_env_missing_raises(monkeypatch):
    monkeypatch.delenv("VRAM_TEST_KEY", raising=False)
    with pytest.raises(ValueError, match="VRAM_TEST_KEY"):
        config.get_env("VRAM_TEST_KEY")


def test_get_env_default(monkeypatch):
    monkeypatch.delenv("VRAM_TEST_KEY", raising=False)
    assert config.get_env("VRAM_TEST_KEY", "fallback") == "fallback"


def test_get_float_env(monkeypatch):
    monkeypatch.setenv("VRAM_TEST_FLOAT", "0.1")
    assert config.get_float_env("VRAM_TEST_FLOAT", 0.05) == 0.1


def test_get_float_env_default(monkeypatch):
    monkeypatch.delenv("VRAM_TEST_FLOAT", raising=False)
    assert config.get_float_env("VRAM_TEST_FLOAT", 0.05) == 0.05


def test_get_float_env_not_a_number(monkeypatch):
    monkeypatch.setenv("VRAM_TEST_FLOAT", "lots")
    with pytest.raises(ValueError, match="VRAM_TEST_FLOAT"):
        config.get_float_env("VRAM_TEST_FLOAT", 0.05)
