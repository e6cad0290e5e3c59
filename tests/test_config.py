from __future__ import annotations

from data_alchemist.config import DEFAULT_SAMPLES_DIR, AppSettings


def test_defaults(settings):
    assert settings.ai_api_key is None
    assert settings.ai_model == "gemini-2.0-flash"
    assert settings.ai_base_url.startswith("https://generativelanguage.googleapis.com/")
    assert settings.samples_dir == DEFAULT_SAMPLES_DIR
    assert settings.search_result_limit == 20
    assert settings.instant_search_limit == 10


def test_gemini_key_from_env(monkeypatch):
    monkeypatch.delenv("AI_API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "abc123")
    monkeypatch.setenv("AI_MAX_RETRIES", "3")
    settings = AppSettings(_env_file=None)
    assert settings.ai_api_key == "abc123"
    assert settings.ai_max_retries == 3


def test_generic_key_alias(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("AI_API_KEY", "xyz")
    assert AppSettings(_env_file=None).ai_api_key == "xyz"
