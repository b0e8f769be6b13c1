"""Tests for environment parsing of settings."""

from bizdesk.core.config import Settings


def test_cors_origins_from_comma_list(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.com, http://b.com,")
    assert Settings().CORS_ORIGINS == ["http://a.com", "http://b.com"]


def test_cors_origins_from_json(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["http://a.com", "http://b.com"]')
    assert Settings().CORS_ORIGINS == ["http://a.com", "http://b.com"]


def test_cors_origins_single_value(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "*")
    assert Settings().CORS_ORIGINS == ["*"]
