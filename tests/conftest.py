"""Pytest fixtures for the Scout test suite."""

import pytest

from config import Config
from fakes import SleepRecorder


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def config() -> Config:
    return Config(
        gemini_api_key="gemini-key",
        tavily_api_key="tavily-key",
        discord_webhook_url="https://discord.com/api/webhooks/1/abc",
        notion_api_key="secret_notion",
        notion_database_id="db-123",
    )
