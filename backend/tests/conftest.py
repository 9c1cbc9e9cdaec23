import os

import pytest

# backend.main loads settings at import time
os.environ.setdefault("YOUTUBE_API_KEY", "test-key")
os.environ.setdefault("APP_ENV", "production")

from backend.app.config import Settings  # noqa: E402


@pytest.fixture
def settings():
    return Settings(youtube_api_key="test-key", search_query="new AI tools")
