"""
Shared pytest fixtures for secondlook test suite.

This module provides reusable fixtures for common test data and mock objects
used across multiple test modules.
"""

from unittest.mock import MagicMock

import pytest
from rich.console import Console

from secondlook.config import Auth, Defaults, Settings
from secondlook.models import DescriptionRequest, DescriptionResult

CHAIR_URL = (
    "https://cdn.example.com/image/upload/v1700000000/second-hand/listings/chair.jpg"
)

SAMPLE_DESCRIPTION = (
    "This sturdy wooden dining chair features a classic ladder back and a "
    "comfortable woven seat. The brown finish shows light wear on the legs "
    "but the frame is solid and the joints are tight. A great addition to "
    "any kitchen or dining room looking for rustic charm."
)


@pytest.fixture
def sample_auth():
    """Provide a sample Auth configuration for testing."""
    return Auth(google_api_key="test_api_key_12345")


@pytest.fixture
def sample_defaults():
    """Provide sample default configuration for testing."""
    return Defaults(
        text_model="gemini-2.5-flash",
        request_timeout_seconds=5,
        max_concurrent_requests=2,
    )


@pytest.fixture
def sample_config(sample_auth, sample_defaults):
    """Provide a complete Settings configuration for testing."""
    return Settings(auth=sample_auth, defaults=sample_defaults)


@pytest.fixture
def chair_url():
    return CHAIR_URL


@pytest.fixture
def sample_request():
    """Provide a valid DescriptionRequest for testing."""
    return DescriptionRequest(
        id="req-1",
        image_url=CHAIR_URL,
        category="HOME_GARDEN",
        condition="GOOD",
    )


@pytest.fixture
def sample_description():
    return SAMPLE_DESCRIPTION


@pytest.fixture
def sample_result():
    """Provide a sample DescriptionResult for testing."""
    return DescriptionResult(
        description=SAMPLE_DESCRIPTION,
        suggested_title="Wooden Ladder Back Dining Chair",
        word_count=len(SAMPLE_DESCRIPTION.split()),
        character_count=len(SAMPLE_DESCRIPTION),
        metadata={"model": "gemini-2.5-flash", "style": "detailed"},
    )


def make_genai_response(text, finish_reason="STOP"):
    """Build a mocked generate_content response carrying ``text``."""
    mock_response = MagicMock()
    mock_candidate = MagicMock()
    mock_candidate.finish_reason = finish_reason

    mock_content = MagicMock()
    mock_part = MagicMock()
    mock_part.text = text
    mock_content.parts = [mock_part]
    mock_candidate.content = mock_content

    mock_response.candidates = [mock_candidate]
    return mock_response


@pytest.fixture
def genai_response():
    """Provide the mocked response factory."""
    return make_genai_response


@pytest.fixture
def mock_toml_config():
    """Provide sample TOML configuration data."""
    return {
        "auth": {"google_api_key": "toml_api_key_67890"},
        "defaults": {
            "text_model": "gemini-2.5-pro",
            "request_timeout_seconds": 20,
        },
    }


class _NoOpLiveComponent:
    """A no-op class to replace Rich's live-rendering components during tests."""

    def __init__(self, *args, **kwargs):
        pass  # Absorb all arguments without action.

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False  # Do not suppress exceptions.

    def update(self, *args, **kwargs):
        pass

    def start(self, *args, **kwargs):
        pass

    def stop(self, *args, **kwargs):
        pass


@pytest.fixture(autouse=True)
def mock_rich_live_display(monkeypatch):
    """
    Automatically mocks Rich live-rendering components and the console
    for all tests to ensure speed and deterministic output.
    """
    import secondlook.cli

    monkeypatch.setattr(secondlook.cli, "Status", _NoOpLiveComponent)

    # Create a non-interactive console that still outputs to stdout for CliRunner
    test_console = Console(
        force_terminal=False,
        force_interactive=False,
        no_color=True,
        emoji=False,
        highlight=False,
        width=200,
    )

    monkeypatch.setattr(secondlook.cli, "console", test_console)
