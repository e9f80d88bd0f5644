"""Pytest configuration and shared fixtures for cost engine tests."""

import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock, patch


# ============================================================================
# Ensure local imports work (costengine/, tests/)
# ============================================================================
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


from costengine.services.comparable_store import InMemoryComparableStore  # noqa: E402
from costengine.services.estimate_assembler import EstimateAssembler, PipelineContext  # noqa: E402
from costengine.services.insight_service import FallbackInsightProvider  # noqa: E402
from tests.fixtures.mock_project_data import LLM_INSIGHT_CONTENT, WINTER_NOW  # noqa: E402


# ============================================================================
# Clock & Stores
# ============================================================================

@pytest.fixture
def winter_now():
    """Fixed reference time in January."""
    return WINTER_NOW


@pytest.fixture
def fixed_clock(winter_now):
    """Clock that always returns the winter reference time."""
    return lambda: winter_now


@pytest.fixture
def empty_store():
    """In-memory store with no historical projects."""
    return InMemoryComparableStore(records={})


@pytest.fixture
def seeded_store():
    """In-memory store with the shipped seed comparables."""
    return InMemoryComparableStore()


# ============================================================================
# Pipeline
# ============================================================================

@pytest.fixture
def pipeline_context(fixed_clock, empty_store):
    """Deterministic context: fixed clock, empty store, fallback insight."""
    return PipelineContext(
        comparable_store=empty_store,
        insight_provider=FallbackInsightProvider(),
        clock=fixed_clock,
        insight_retry_wait_seconds=0,
    )


@pytest.fixture
def assembler(pipeline_context):
    """EstimateAssembler over the deterministic context."""
    return EstimateAssembler(pipeline_context)


# ============================================================================
# Firebase Mocks
# ============================================================================

@pytest.fixture
def mock_firestore_client():
    """Mock Firestore client."""
    client = MagicMock()

    collection_mock = MagicMock()
    query_mock = MagicMock()
    document_mock = MagicMock()

    # Chain: client.collection().where().order_by().stream() / client.collection().document()
    client.collection.return_value = collection_mock
    collection_mock.where.return_value = query_mock
    query_mock.order_by.return_value = query_mock
    collection_mock.document.return_value = document_mock

    query_mock.stream.return_value = []
    document_mock.set = AsyncMock()

    return client


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client returning a valid insight reply."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content=LLM_INSIGHT_CONTENT,
        response_metadata={"token_usage": {"total_tokens": 420}}
    )
    return mock


@pytest.fixture
def mock_llm_provider(mock_chat_openai):
    """LLMInsightProvider wired to the mocked client."""
    from costengine.services.insight_service import LLMInsightProvider

    with patch('costengine.services.insight_service.ChatOpenAI', return_value=mock_chat_openai):
        provider = LLMInsightProvider(model="gpt-4o", temperature=0.3, api_key="test-api-key")
        provider._client = mock_chat_openai
        return provider


# ============================================================================
# Environment Setup
# ============================================================================

@pytest.fixture
def mock_settings():
    """Patch the settings seen by the insight service."""
    with patch('costengine.services.insight_service.settings') as mock:
        mock.openai_api_key = "test-api-key"
        mock.llm_model = "gpt-4o"
        mock.llm_temperature = 0.3
        mock.llm_enabled = True
        yield mock


@pytest.fixture(autouse=True)
def clear_secrets():
    """Reset cached secrets between tests."""
    from costengine.config.secrets import clear_secret_cache

    clear_secret_cache()
    yield
    clear_secret_cache()
