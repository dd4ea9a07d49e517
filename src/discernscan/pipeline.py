"""
Analysis pipeline for DiscernScan.

Drives every search result through extraction, evaluation and validation,
one URL at a time in ranking order, and collects accepted results while
recording why the other URLs were rejected.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

import structlog
from structlog.contextvars import bound_contextvars

from discernscan.config.config import PipelineSettings
from discernscan.exceptions import AnalysisError, ConfigurationError, DiscernScanError, NoSuccessfulAnalyses
from discernscan.extractor.manager import ContentExtractor
from discernscan.evaluator.evaluator import RubricEvaluator
from discernscan.observability import histogram, increment
from discernscan.protocols import (
    AnalysisFailure,
    AnalysisOutcome,
    AnalysisReport,
    AnalysisSuccess,
    ProgressEvent,
    SearchAnalysis,
    SearchResultItem,
    URLState,
)
from discernscan.search.serpapi import SearchProvider
from discernscan.validation import validate_result

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[ProgressEvent], Union[None, Awaitable[None]]]


class Pacer:
    """
    Enforces a minimum gap between the end of one evaluation and the start of the next.

    The first evaluation starts immediately.
    """

    def __init__(
        self,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last_finished: Optional[float] = None

    async def wait(self) -> float:
        """Sleep until the next evaluation may start; returns the time slept."""
        if self._last_finished is None:
            return 0.0
        remaining = self.interval - (self._clock() - self._last_finished)
        if remaining <= 0:
            return 0.0
        await self._sleep(remaining)
        return remaining

    def mark_finished(self) -> None:
        self._last_finished = self._clock()


class AnalysisPipeline:
    """
    Sequential DISCERN analysis of ranked search results.

    Per URL: ``pending -> extracting -> evaluating -> validating`` and then
    ``accepted`` or ``rejected``. A failure on one URL never aborts the batch;
    only a batch without any accepted result raises ``NoSuccessfulAnalyses``.
    """

    def __init__(
        self,
        extractor: ContentExtractor,
        evaluator: RubricEvaluator,
        settings: PipelineSettings,
        search_provider: Optional[SearchProvider] = None,
        *,
        pacer: Optional[Pacer] = None,
    ) -> None:
        self.extractor = extractor
        self.evaluator = evaluator
        self.settings = settings
        self.search_provider = search_provider
        self.pacer = pacer or Pacer(settings.evaluation_interval_seconds)
        self.logger = logger.bind(component="AnalysisPipeline")

    async def run(
        self,
        search_results: Sequence[SearchResultItem],
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AnalysisReport:
        """
        Analyze ``search_results`` in ranking order.

        Args:
            search_results: Results to analyze; processed by ascending ranking.
            on_progress: Sync or async callable receiving a ``ProgressEvent`` on
                every state transition.
            cancel_event: Checked before each URL. Once set, the URL in flight
                finishes and the rest are reported as skipped.

        Returns:
            AnalysisReport with accepted results and rejected URLs.

        Raises:
            NoSuccessfulAnalyses: if no URL was accepted.
        """
        items = sorted(search_results, key=lambda item: item.ranking)
        total = len(items)
        report = AnalysisReport()
        self.logger.info("Starting analysis", urls=total)

        for position, item in enumerate(items):
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                report.skipped = [remaining.url for remaining in items[position:]]
                self.logger.info("Analysis cancelled", processed=position, skipped=len(report.skipped))
                break
            with bound_contextvars(url=item.url, ranking=item.ranking):
                outcome = await self._process(item, position + 1, total, on_progress)
            report.outcomes.append(outcome)

        self.logger.info(
            "Analysis finished",
            accepted=len(report.results),
            rejected=len(report.failures),
            skipped=len(report.skipped),
            cancelled=report.cancelled,
        )
        if not report.results:
            raise NoSuccessfulAnalyses(report.failures)
        return report

    async def search_and_analyze(
        self,
        keyword: str,
        quantity: int,
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> SearchAnalysis:
        """Search for ``keyword`` and analyze up to ``quantity`` results."""
        if self.search_provider is None:
            raise ConfigurationError("No search provider configured")

        search = await self.search_provider.search(keyword, quantity)
        if search.shortfall:
            self.logger.warning("Search returned fewer results than requested", message=search.metadata.message)
        if not search.results:
            raise NoSuccessfulAnalyses(message=f"No search results for {keyword!r}: {search.metadata.message}")

        report = await self.run(search.results, on_progress=on_progress, cancel_event=cancel_event)
        return SearchAnalysis(keyword=keyword, search=search, report=report)

    async def _process(
        self,
        item: SearchResultItem,
        index: int,
        total: int,
        on_progress: Optional[ProgressCallback],
    ) -> AnalysisOutcome:
        url = item.url

        async def transition(state: URLState, message: str = "") -> None:
            await self._emit(on_progress, ProgressEvent(index=index, total=total, url=url, state=state, message=message))

        stage = URLState.PENDING
        await transition(stage)
        try:
            stage = URLState.EXTRACTING
            await transition(stage)
            content = await self.extractor.extract(url, title=item.title or None)

            stage = URLState.EVALUATING
            await transition(stage)
            title = item.title or content.title or url
            await self.pacer.wait()
            try:
                result = await self.evaluator.evaluate(content.text, title, url, is_video=content.is_video)
            finally:
                self.pacer.mark_finished()

            stage = URLState.VALIDATING
            await transition(stage)
            validate_result(result)
        except DiscernScanError as e:
            message = e.message if isinstance(e, AnalysisError) else str(e)
            failure = AnalysisFailure(url=url, error_kind=type(e).__name__, message=message, stage=stage, title=item.title)
            self.logger.warning("URL rejected", stage=stage.value, error_kind=failure.error_kind, error=message)
        except Exception as e:
            failure = AnalysisFailure(
                url=url,
                error_kind=type(e).__name__,
                message=str(e) or type(e).__name__,
                stage=stage,
                title=item.title,
            )
            self.logger.exception("Unexpected error analyzing URL", stage=stage.value)
        else:
            increment("urls_processed", labels={"outcome": URLState.ACCEPTED.value})
            histogram("total_score", result.total_score)
            self.logger.info("URL accepted", total_score=result.total_score, type=result.type)
            await transition(URLState.ACCEPTED, f"totalScore {result.total_score}")
            return AnalysisSuccess(result)

        increment("urls_processed", labels={"outcome": URLState.REJECTED.value})
        increment("urls_rejected", labels={"stage": failure.stage.value, "error_kind": failure.error_kind})
        await transition(URLState.REJECTED, f"{failure.error_kind}: {failure.message}")
        return failure

    async def _emit(self, callback: Optional[ProgressCallback], event: ProgressEvent) -> None:
        if callback is None:
            return
        try:
            ret = callback(event)
            if inspect.isawaitable(ret):
                await ret
        except Exception:
            self.logger.exception("Progress callback failed", state=event.state.value)
