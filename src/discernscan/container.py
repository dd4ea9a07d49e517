"""
Dependency injection container wiring DiscernScan components together.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, Dict, Generic, Optional, TypeVar
from uuid import uuid4

import structlog

from discernscan.config import Config, load_config

if TYPE_CHECKING:
    from openai import AsyncOpenAI

    from discernscan.crawler.http_client import HttpClient
    from discernscan.evaluator import RubricEvaluator
    from discernscan.extractor import ContentExtractor
    from discernscan.pipeline import AnalysisPipeline
    from discernscan.search import SerpApiSearchProvider

T = TypeVar("T")


class LazyInstance(Generic[T]):
    """Lazy-loaded instance with lifecycle management."""

    def __init__(self, factory: Callable[..., T], *args: Any, **kwargs: Any) -> None:
        self._factory = factory
        self._args = args
        self._kwargs = kwargs
        self._instance: Optional[T] = None
        self._initialized = False

    async def get(self) -> T:
        """Get or create the instance."""
        if not self._initialized:
            self._instance = self._factory(*self._args, **self._kwargs)
            if callable(getattr(self._instance, "initialize", None)):
                await self._instance.initialize()  # type: ignore[attr-defined]
            self._initialized = True
        assert self._instance is not None
        return self._instance

    async def cleanup(self) -> None:
        """Clean up the instance."""
        if self._instance is not None and callable(getattr(self._instance, "close", None)):
            await self._instance.close()  # type: ignore[attr-defined]
        self._instance = None
        self._initialized = False


class DependencyContainer:
    """
    Builds the HTTP client, OpenAI client, extractor, evaluator, search provider
    and pipeline from one ``Config`` and closes network resources on shutdown.

    Credentials are checked at construction so a run fails before any request.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        config_path: Optional[Path] = None,
        *,
        require_search: bool = True,
    ) -> None:
        self.config_path = config_path
        self.config: Config = config if config is not None else load_config(config_path)
        self.config.require_credentials(search=require_search)
        self.require_search = require_search
        self.logger = structlog.get_logger(self.__class__.__name__)
        self.run_id = str(uuid4())
        self.is_running = False
        self._instances: Dict[str, LazyInstance[Any]] = {}

    def _create_instances(self) -> None:
        from discernscan.crawler.http_client import HttpClient
        from discernscan.evaluator.strategies import create_client

        self._instances = {
            "http_client": LazyInstance(HttpClient, self.config.http),
            "openai_client": LazyInstance(create_client, self.config.evaluator),
        }

    async def initialize(self) -> None:
        self._create_instances()
        self.is_running = True
        self.logger.info(
            "Dependency container initialized",
            run_id=self.run_id,
            config_path=str(self.config_path) if self.config_path else "default",
        )

    async def get_http_client(self) -> HttpClient:
        return await self._instances["http_client"].get()  # type: ignore[no-any-return]

    async def get_openai_client(self) -> AsyncOpenAI:
        return await self._instances["openai_client"].get()  # type: ignore[no-any-return]

    async def get_extractor(self) -> ContentExtractor:
        from discernscan.extractor import ContentExtractor, YouTubeTranscriptProvider

        settings = self.config.extraction
        providers = {}
        if settings.transcripts_enabled:
            provider = YouTubeTranscriptProvider(
                languages=settings.transcript_languages, timeout=settings.transcript_timeout_seconds
            )
            providers[provider.platform] = provider
        return ContentExtractor(await self.get_http_client(), settings, transcript_providers=providers)

    async def get_evaluator(self) -> RubricEvaluator:
        from discernscan.evaluator import RubricEvaluator, build_strategies

        client = await self.get_openai_client()
        return RubricEvaluator(build_strategies(client, self.config.evaluator), self.config.evaluator)

    async def get_search_provider(self) -> SerpApiSearchProvider:
        from discernscan.search import SerpApiSearchProvider

        return SerpApiSearchProvider(await self.get_http_client(), self.config.search)

    async def get_pipeline(self) -> AnalysisPipeline:
        from discernscan.pipeline import AnalysisPipeline

        search_provider = await self.get_search_provider() if self.require_search else None
        return AnalysisPipeline(
            await self.get_extractor(),
            await self.get_evaluator(),
            self.config.pipeline,
            search_provider=search_provider,
        )

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator[DependencyContainer]:
        """Context manager for proper lifecycle management."""
        try:
            await self.initialize()
            yield self
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        if not self.is_running:
            return
        self.logger.info("Shutting down dependency container", run_id=self.run_id)
        for name, instance in self._instances.items():
            try:
                await instance.cleanup()
            except Exception as e:
                self.logger.error(f"Error cleaning up {name}", error=str(e))
        self.is_running = False
