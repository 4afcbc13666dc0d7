"""
Tests for environment variable helpers.
"""
from utils.environ import get_first_env, get_int_env


def test_first_env_prefers_primary_name(monkeypatch):
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "primary")
    monkeypatch.setenv("DISCORD_TOKEN", "legacy")
    assert get_first_env("DISCORD_BOT_TOKEN", "DISCORD_TOKEN") == "primary"


def test_first_env_falls_back_to_legacy_token(monkeypatch):
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)
    monkeypatch.setenv("DISCORD_TOKEN", "legacy")
    assert get_first_env("DISCORD_BOT_TOKEN", "DISCORD_TOKEN") == "legacy"


def test_first_env_skips_empty_values(monkeypatch):
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "")
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    assert get_first_env("DISCORD_BOT_TOKEN", "DISCORD_TOKEN") is None
    assert get_first_env("DISCORD_BOT_TOKEN", "DISCORD_TOKEN", default="x") == "x"


def test_int_env_uses_default_on_garbage(monkeypatch):
    monkeypatch.setenv("CHECK_EVERY_MINUTES", "soon")
    assert get_int_env("CHECK_EVERY_MINUTES", 10) == 10
