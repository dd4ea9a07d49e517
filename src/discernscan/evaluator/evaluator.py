"""
RubricEvaluator: scores content against the DISCERN rubric with a language model.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, Sequence

import structlog
from tenacity import AsyncRetrying, RetryCallState, RetryError, retry_if_exception, stop_after_attempt, wait_exponential

from discernscan.config.config import EvaluatorSettings
from discernscan.exceptions import AnalysisError, EvaluationFailed
from discernscan.extractor.video import is_video_url
from discernscan.observability import histogram, increment
from discernscan.protocols import DiscernResult

from .parser import parse_evaluation
from .prompts import SYSTEM_PROMPT, build_user_prompt
from .strategies import EvaluationStrategy

logger = structlog.get_logger(__name__)


def is_transient(error: BaseException) -> bool:
    return isinstance(error, AnalysisError) and error.transient


class RubricEvaluator:
    """
    Submits content to one or more evaluation strategies and parses the answer.

    Each strategy call, parsing included, is retried on transient errors
    (``TransportError``, ``MalformedResponse``, ``EvaluationTimeout``) up to
    ``max_attempts`` times with exponential backoff. A strategy that still fails
    hands over to the next one; when every strategy failed, the last error is
    raised. The evaluator keeps no state between calls.
    """

    def __init__(
        self,
        strategies: Sequence[EvaluationStrategy],
        settings: EvaluatorSettings,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if not strategies:
            raise ValueError("RubricEvaluator needs at least one strategy")
        self.strategies = list(strategies)
        self.settings = settings
        self._sleep = sleep
        self.logger = logger.bind(component="RubricEvaluator")

    def _retrying(self, strategy: EvaluationStrategy, url: str) -> AsyncRetrying:
        def log_retry(state: RetryCallState) -> None:
            error = state.outcome.exception() if state.outcome else None
            self.logger.warning(
                "Retrying evaluation",
                url=url,
                strategy=strategy.name,
                attempt=state.attempt_number,
                error_kind=type(error).__name__,
                error=str(error),
            )

        return AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_attempts),
            wait=wait_exponential(
                multiplier=self.settings.backoff_base_seconds,
                exp_base=2,
                max=self.settings.backoff_max_seconds,
            ),
            retry=retry_if_exception(is_transient),
            sleep=self._sleep,
            before_sleep=log_retry,
            reraise=False,
        )

    async def _evaluate_with(self, strategy: EvaluationStrategy, user_prompt: str, title: str, url: str) -> DiscernResult:
        try:
            async for attempt in self._retrying(strategy, url):
                with attempt:
                    text = await strategy.complete(SYSTEM_PROMPT, user_prompt)
                    return parse_evaluation(text, url=url, title=title)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            raise EvaluationFailed(last_error, attempts=e.last_attempt.attempt_number, url=url) from last_error
        raise AssertionError("unreachable")

    async def evaluate(
        self,
        content: str,
        title: str,
        url: str,
        *,
        is_video: Optional[bool] = None,
    ) -> DiscernResult:
        if is_video is None:
            is_video = is_video_url(url)
        user_prompt = build_user_prompt(content, title, url, is_video=is_video)

        last_error: Optional[AnalysisError] = None
        for strategy in self.strategies:
            start = time.monotonic()
            try:
                result = await self._evaluate_with(strategy, user_prompt, title, url)
            except AnalysisError as e:
                if e.url is None:
                    e.url = url
                last_error = e
                increment("evaluation_attempts", labels={"strategy": strategy.name, "result": "failure"})
                self.logger.warning(
                    "Evaluation strategy failed",
                    url=url,
                    strategy=strategy.name,
                    error_kind=e.kind,
                    error=e.message,
                )
                continue
            finally:
                histogram("evaluation_duration_seconds", time.monotonic() - start)

            increment("evaluation_attempts", labels={"strategy": strategy.name, "result": "success"})
            self.logger.info("Evaluation completed", url=url, strategy=strategy.name, total_score=result.total_score)
            return result

        assert last_error is not None
        raise last_error
