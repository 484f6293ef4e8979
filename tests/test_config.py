"""
Tests for settings validation.
"""

import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_provider_defaults():
    config = Settings()
    assert config.SCRAPER_PROVIDER == "scrapingdog"
    assert config.LLM_PROVIDER == "anthropic"


def test_provider_names_are_normalized():
    config = Settings(SCRAPER_PROVIDER=" Apify ", LLM_PROVIDER="OpenAI")
    assert config.SCRAPER_PROVIDER == "apify"
    assert config.LLM_PROVIDER == "openai"


@pytest.mark.parametrize("field, value", [
    ("SCRAPER_PROVIDER", "proxycurl"),
    ("LLM_PROVIDER", "gemini"),
])
def test_unknown_provider_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_cors_origins_from_comma_list():
    config = Settings(BACKEND_CORS_ORIGINS="https://a.example.com, https://b.example.com")
    assert config.BACKEND_CORS_ORIGINS == ["https://a.example.com", "https://b.example.com"]
