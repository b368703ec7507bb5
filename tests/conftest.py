"""Pytest configuration and shared fixtures."""

import asyncio
from pathlib import Path
from typing import Optional
from unittest.mock import Mock

import pytest
import pytest_asyncio

from freightsmith.dictionary import DictionaryStore
from freightsmith.history import HistoryStore
from freightsmith.llm import AnthropicClient
from freightsmith.resolution import AIFallbackResolver, FallbackResult, FallbackSuggestion

STANDARD_HEADERS = [
    "Business Unit",
    "ContainerNumber",
    "Shipper's Full Name",
    "Ship to City",
    "Actual Departure (ATD)",
]


class FakeFallback(AIFallbackResolver):
    """Scripted fallback resolver that records what it was asked."""

    def __init__(
        self,
        suggestions: Optional[dict] = None,
        forwarder_name: Optional[str] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.suggestions = suggestions or {}
        self.forwarder_name = forwarder_name
        self.error = error
        self.delay = delay
        self.calls: list[list[str]] = []

    async def suggest(self, headers, sample_rows):
        self.calls.append(list(headers))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error

        suggestions = {}
        for header in headers:
            value = self.suggestions.get(header)
            if value is None:
                continue
            if isinstance(value, FallbackSuggestion):
                suggestions[header] = value
            else:
                field, confidence = value
                suggestions[header] = FallbackSuggestion(
                    suggested_canonical_field=field, confidence=confidence
                )
        return FallbackResult(forwarder_name=self.forwarder_name, suggestions=suggestions)


@pytest.fixture
def make_fallback():
    """Factory for scripted fallback resolvers."""
    return FakeFallback


@pytest.fixture
def standard_headers() -> list[str]:
    """Required headers of the standard container export."""
    return list(STANDARD_HEADERS)


@pytest.fixture
def standard_rows() -> list[dict]:
    """Two rows in the standard container export layout."""
    return [
        {
            "Business Unit": "Retail",
            "ContainerNumber": "MSCU1234567",
            "Shipper's Full Name": "Acme Exports Ltd",
            "Ship to City": "Chicago",
            "Actual Departure (ATD)": "2024-03-01",
            "OCEAN FREIGHT COSTS": "$2,450.00",
            "Last Free Day": 45366,
        },
        {
            "Business Unit": "Wholesale",
            "ContainerNumber": "TGHU7654321",
            "Shipper's Full Name": "Globex",
            "Ship to City": "Dallas",
            "Actual Departure (ATD)": "",
            "OCEAN FREIGHT COSTS": None,
            "Last Free Day": "not a date",
        },
    ]


@pytest_asyncio.fixture
async def dictionary_store(tmp_path: Path):
    """Create a dictionary store on a temporary database."""
    store = DictionaryStore(tmp_path / "test_dictionary.db")
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def history_store(tmp_path: Path):
    """Create a history store on a temporary database."""
    store = HistoryStore(tmp_path / "test_history.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def mock_anthropic_client() -> Mock:
    """Create a mocked Anthropic client."""
    client = Mock(spec=AnthropicClient)

    mock_response = Mock()
    mock_response.content = [Mock(type="text", text='{"forwarderName": null}')]
    mock_response.stop_reason = "end_turn"
    mock_response.usage = Mock(input_tokens=100, output_tokens=50)

    client.client = Mock()
    client.client.messages = Mock()
    client.client.messages.create = Mock(return_value=mock_response)

    return client


# Configure pytest-asyncio
def pytest_configure(config):
    """Configure pytest with asyncio settings."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
