"""Requirement insight service.

The insight is an optional, time-bounded external call. Providers implement
``analyze(request) -> RequirementInsight``; ``analyze_with_fallback`` bounds
each attempt with a timeout, retries once, and on any failure returns the
documented fallback insight instead of raising.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from costengine.config.errors import ErrorCode, InsightError
from costengine.config.settings import settings
from costengine.models.insight import InsightRequest, InsightSource, RequirementInsight

logger = structlog.get_logger(__name__)

DEFAULT_RETRY_WAIT_SECONDS = 0.5

SYSTEM_PROMPT = (
    "You are an experienced construction estimator with 20+ years of experience "
    "in residential, commercial, and industrial projects."
)

ANALYSIS_PROMPT = """Analyze the following construction project and provide detailed insights:

Project Type: {category}
Subcategory: {subcategory}
Location: {location}
Square Footage: {square_footage}
Stories: {stories}
Special Requirements: {special_requirements}

Provide:
1. Key construction phases for this project type
2. Major material categories
3. Required trades
4. Potential challenges or complexities
5. Any assumptions made in the analysis

Format as JSON with keys: phases, materials, labor, challenges, assumptions.
Each key maps to a list of short strings."""


class InsightProvider(ABC):
    """Capability producing a requirement insight for a project."""

    name: str = "provider"

    @abstractmethod
    async def analyze(self, request: InsightRequest) -> RequirementInsight:
        """Analyze a project.

        Raises:
            InsightError: If the analysis cannot be produced.
        """


class FallbackInsightProvider(InsightProvider):
    """Deterministic provider returning the documented fallback insight."""

    name = "fallback"

    async def analyze(self, request: InsightRequest) -> RequirementInsight:
        return RequirementInsight.fallback()


class LLMInsightProvider(InsightProvider):
    """Insight provider backed by an OpenAI chat model via LangChain."""

    name = "llm"

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None
    ):
        """Initialize LLMInsightProvider.

        Args:
            model: Model name (default from settings).
            temperature: Temperature (default from settings).
            api_key: OpenAI API key (default from settings).
        """
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self.api_key = api_key or settings.openai_api_key

        self._client: Optional[ChatOpenAI] = None
        self._total_tokens_used = 0

    @property
    def client(self) -> ChatOpenAI:
        """Get LangChain ChatOpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
                api_key=self.api_key
            )
        return self._client

    @property
    def total_tokens_used(self) -> int:
        return self._total_tokens_used

    @staticmethod
    def build_prompt(request: InsightRequest) -> str:
        return ANALYSIS_PROMPT.format(
            category=request.category,
            subcategory=request.subcategory or "Not specified",
            location=request.location,
            square_footage=request.square_footage or "Not specified",
            stories=request.stories or "Not specified",
            special_requirements=", ".join(request.special_requirements) or "None",
        )

    @staticmethod
    def parse_content(content: str) -> Dict[str, Any]:
        """Parse the model's JSON reply, tolerating markdown code fences.

        Raises:
            InsightError: If the reply is not a JSON object.
        """
        text = content.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        try:
            parsed = json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise InsightError(
                code=ErrorCode.INSIGHT_INVALID_RESPONSE,
                message="LLM did not return valid JSON",
                provider="llm",
                details={"parse_error": str(e), "raw_content": content[:500]}
            )
        if not isinstance(parsed, dict):
            raise InsightError(
                code=ErrorCode.INSIGHT_INVALID_RESPONSE,
                message="LLM returned JSON that is not an object",
                provider="llm",
                details={"raw_content": content[:500]}
            )
        return parsed

    async def analyze(self, request: InsightRequest) -> RequirementInsight:
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=self.build_prompt(request)),
        ]
        try:
            response = await self.client.ainvoke(messages)
        except Exception as e:
            raise InsightError(
                code=ErrorCode.INSIGHT_FAILED,
                message=f"LLM analysis failed: {str(e)}",
                provider=self.name,
                details={"original_error": str(e)}
            )

        tokens_used = 0
        if hasattr(response, "response_metadata"):
            usage = response.response_metadata.get("token_usage", {})
            tokens_used = usage.get("total_tokens", 0)
            self._total_tokens_used += tokens_used

        parsed = self.parse_content(response.content)
        try:
            insight = RequirementInsight.model_validate({**parsed, "source": InsightSource.PROVIDER})
        except ValidationError as e:
            raise InsightError(
                code=ErrorCode.INSIGHT_INVALID_RESPONSE,
                message="LLM insight has an unexpected shape",
                provider=self.name,
                details={"validation_error": str(e)}
            )

        logger.info(
            "insight_generated",
            model=self.model,
            tokens_used=tokens_used,
            phases=len(insight.phases),
            challenges=len(insight.challenges),
        )
        return insight


async def analyze_with_fallback(
    provider: InsightProvider,
    request: InsightRequest,
    timeout_seconds: float,
    max_attempts: int = 2,
    retry_wait_seconds: float = DEFAULT_RETRY_WAIT_SECONDS,
) -> RequirementInsight:
    """
    Run a provider with a per-attempt timeout and a bounded retry.

    Never raises: after the last failed attempt (or on any unexpected
    provider error) the fallback insight is returned.

    Args:
        provider: Insight provider to call
        request: Project payload
        timeout_seconds: Timeout for each attempt
        max_attempts: Total attempts (2 = one retry)
        retry_wait_seconds: Pause between attempts

    Returns:
        Provider insight, or RequirementInsight.fallback()
    """
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_fixed(retry_wait_seconds),
            retry=retry_if_exception_type((InsightError, asyncio.TimeoutError)),
            reraise=True,
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                if attempt_number > 1:
                    logger.info(
                        "insight_retry",
                        provider=provider.name,
                        attempt=attempt_number,
                    )
                return await asyncio.wait_for(provider.analyze(request), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(
            "insight_timeout",
            provider=provider.name,
            code=ErrorCode.INSIGHT_TIMEOUT,
            timeout_seconds=timeout_seconds,
            attempts=max_attempts,
        )
    except InsightError as e:
        logger.warning(
            "insight_failed",
            provider=provider.name,
            code=e.code,
            error=e.message,
            attempts=max_attempts,
        )
    except Exception as e:
        logger.error(
            "insight_unexpected_error",
            provider=provider.name,
            error=str(e),
            error_type=type(e).__name__,
        )

    return RequirementInsight.fallback()


def default_insight_provider() -> InsightProvider:
    """LLM provider when an API key is configured, otherwise the fallback."""
    if settings.llm_enabled:
        return LLMInsightProvider()
    logger.info("insight_provider_fallback_only", reason="OPENAI_API_KEY not configured")
    return FallbackInsightProvider()
