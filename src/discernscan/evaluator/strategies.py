"""
Evaluation strategies: interchangeable ways of getting a completion from the model.

Every strategy implements ``complete(system_prompt, user_prompt) -> str`` and
maps provider failures onto the DiscernScan error taxonomy, so the evaluator can
retry transient errors and fall back to the next strategy uniformly.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Protocol, runtime_checkable

import openai
import structlog
from openai import AsyncOpenAI

from discernscan.config.config import EvaluatorSettings
from discernscan.exceptions import EvaluationError, EvaluationTimeout, MalformedResponse, TransportError

logger = structlog.get_logger(__name__)

PENDING_STATUSES = frozenset({"queued", "in_progress"})


@runtime_checkable
class EvaluationStrategy(Protocol):
    name: str

    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


@contextmanager
def map_provider_errors(strategy: str) -> Iterator[None]:
    """Translate OpenAI client exceptions into ``TransportError`` / ``EvaluationError``."""
    try:
        yield
    except openai.APITimeoutError as e:
        raise TransportError(f"{strategy}: request timed out") from e
    except openai.APIConnectionError as e:
        raise TransportError(f"{strategy}: connection error: {e}") from e
    except openai.RateLimitError as e:
        raise TransportError(f"{strategy}: rate limited", status=e.status_code) from e
    except openai.APIStatusError as e:
        if e.status_code >= 500:
            raise TransportError(f"{strategy}: provider error {e.status_code}", status=e.status_code) from e
        raise EvaluationError(f"{strategy}: request rejected with status {e.status_code}: {e.message}") from e


def _sampling_kwargs(settings: EvaluatorSettings) -> Dict[str, Any]:
    if settings.temperature is None:
        return {}
    return {"temperature": settings.temperature}


class BackgroundResponseStrategy:
    """
    Responses API in background mode.

    The job is created with ``background=True`` and polled every
    ``poll_interval_seconds`` for at most ``max_polls`` polls, after which the
    job is cancelled and ``EvaluationTimeout`` is raised.
    """

    name = "background_response"

    def __init__(
        self,
        client: AsyncOpenAI,
        settings: EvaluatorSettings,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.settings = settings
        self._sleep = sleep
        self.logger = logger.bind(component="BackgroundResponseStrategy")

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        with map_provider_errors(self.name):
            response = await self.client.responses.create(
                model=self.settings.model,
                instructions=system_prompt,
                input=user_prompt,
                background=True,
                **_sampling_kwargs(self.settings),
            )

            polls = 0
            while response.status in PENDING_STATUSES:
                if polls >= self.settings.max_polls:
                    await self._cancel(response.id)
                    raise EvaluationTimeout(
                        f"Background response {response.id} still {response.status} after {polls} polls"
                    )
                await self._sleep(self.settings.poll_interval_seconds)
                response = await self.client.responses.retrieve(response.id)
                polls += 1
                self.logger.debug("Polled background response", response_id=response.id, status=response.status, polls=polls)

        if response.status != "completed":
            detail = getattr(response.error, "message", None) or getattr(response, "incomplete_details", None)
            raise EvaluationError(f"Background response ended with status {response.status}: {detail}")

        text = response.output_text
        if not text:
            raise MalformedResponse("Background response completed without output text")
        return text

    async def _cancel(self, response_id: str) -> None:
        try:
            await self.client.responses.cancel(response_id)
        except openai.OpenAIError as e:
            self.logger.warning("Could not cancel background response", response_id=response_id, error=str(e))


class ChatCompletionStrategy:
    """Chat Completions with a JSON-object response format."""

    name = "chat_completion"

    def __init__(self, client: AsyncOpenAI, settings: EvaluatorSettings) -> None:
        self.client = client
        self.settings = settings

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        with map_provider_errors(self.name):
            completion = await self.client.chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                **_sampling_kwargs(self.settings),
            )
        if not completion.choices:
            raise MalformedResponse("Chat completion returned no choices")
        content = completion.choices[0].message.content
        if not content:
            raise MalformedResponse("Chat completion returned empty content")
        return content


STRATEGY_CLASSES = {
    BackgroundResponseStrategy.name: BackgroundResponseStrategy,
    ChatCompletionStrategy.name: ChatCompletionStrategy,
}


def build_strategies(client: AsyncOpenAI, settings: EvaluatorSettings) -> list[EvaluationStrategy]:
    """Instantiate the configured strategies in fallback order."""
    return [STRATEGY_CLASSES[name](client, settings) for name in settings.strategies]


def create_client(settings: EvaluatorSettings, api_key: Optional[str] = None) -> AsyncOpenAI:
    """Build the OpenAI client; retries are owned by the evaluator, not the SDK."""
    key = api_key or (settings.api_key.get_secret_value() if settings.api_key else None)
    return AsyncOpenAI(
        api_key=key,
        base_url=settings.base_url,
        timeout=settings.request_timeout,
        max_retries=0,
    )
