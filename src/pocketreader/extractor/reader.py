"""
ArticleReader: runs the extraction phases for one document.

The reader is stateless between calls. Every call parses its own document,
and nothing from one call is visible to another, so a single reader may be
shared across threads.
"""

from __future__ import annotations

import asyncio
import functools
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Union

import structlog

from ..config.config import Config, settings
from ..errors import Cancelled, ReaderError
from ..observability import histogram, increment
from ..parser.builder import parse_document
from .content import ContentExtractor
from .models import Article
from .normalizer import Normalizer
from .protocols import CancelSignal, SourceItem
from .renderer import Renderer
from .scorer import CandidateScorer
from .title import TitleExtractor

logger = structlog.get_logger(__name__)


class _Phases:
    """Polls cancellation before each phase and times it."""

    def __init__(self, cancel: Optional[CancelSignal], deadline: Optional[float], record: bool, log: Any) -> None:
        self.cancel = cancel
        self.expires = time.monotonic() + deadline if deadline is not None else None
        self.record = record
        self.log = log

    @contextmanager
    def phase(self, name: str) -> Iterator[None]:
        if self.cancel is not None and self.cancel.is_set():
            raise Cancelled(name)
        if self.expires is not None and time.monotonic() >= self.expires:
            raise Cancelled(name)
        start = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start
        self.log.debug("Phase completed", phase=name, elapsed=round(elapsed, 6))
        if self.record:
            histogram("extraction_duration_seconds", elapsed, {"phase": name})


class ArticleReader:
    """
    Extracts a clean article from a fetched HTML document.

    Phases: parse, normalize, score, extract, render. Cancellation and the
    optional deadline are checked between phases; a cancelled call returns
    nothing.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config: Config = config if config is not None else settings
        self.normalizer = Normalizer()
        self.scorer = CandidateScorer(self.config.scoring)
        self.extractor = ContentExtractor(self.scorer, self.config.extraction)
        self.titles = TitleExtractor(self.config.extraction)
        self.renderer = Renderer()
        self.logger = logger.bind(component="ArticleReader")

    def read(
        self,
        markup: Union[str, bytes],
        base_uri: Optional[str] = None,
        *,
        body_only: Optional[bool] = None,
        no_headline: Optional[bool] = None,
        title_hint: Optional[str] = None,
        encoding: Optional[str] = None,
        cancel: Optional[CancelSignal] = None,
        deadline: Optional[float] = None,
    ) -> Article:
        """
        Extract the article contained in ``markup``.

        Args:
            markup: Raw document, text or undecoded bytes
            base_uri: Address the document was fetched from, for link resolution
            body_only: Render only the article region (default from settings)
            no_headline: Drop the leading heading of the region (default from settings)
            title_hint: Title known by the caller; wins over every in-document source
            encoding: Encoding to try first when ``markup`` is bytes
            cancel: Signal polled between phases
            deadline: Seconds after which the call is cancelled between phases

        Returns:
            The extracted Article

        Raises:
            ParseError: ``markup`` bytes cannot be decoded
            ExtractionError: no candidate reaches the minimum score
            Cancelled: ``cancel`` or ``deadline`` fired
        """
        extraction = self.config.extraction
        body_only = extraction.default_body_only if body_only is None else body_only
        no_headline = extraction.default_no_headline if no_headline is None else no_headline
        record = self.config.monitoring.metrics_enabled
        phases = _Phases(cancel, deadline, record, self.logger)
        started = time.perf_counter()

        try:
            with phases.phase("parse"):
                document = parse_document(markup, base_uri, encoding=encoding)
            with phases.phase("normalize"):
                self.normalizer.normalize(document)
            with phases.phase("score"):
                scored = self.scorer.score(document)
                primary = self.scorer.select_primary(scored)
            with phases.phase("extract"):
                region = self.extractor.extract(scored, primary)
                title = self.titles.extract(document, region.nodes, excluded=region.excluded, hint=title_hint)
                headline = self.extractor.strip_headline(region) if no_headline else None
                layout = self.extractor.layout(region, body_only)
            with phases.phase("render"):
                content = self.renderer.render(
                    document, layout.roots, exclude=region.excluded, children=layout.children
                )
                text = self.renderer.render_text(document, region.nodes, exclude=region.excluded)
        except ReaderError as e:
            if record:
                increment("extractions_total", labels={"outcome": type(e).__name__})
            self.logger.warning(
                "Extraction failed",
                uri=base_uri,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        if record:
            increment("extractions_total", labels={"outcome": "success"})
            histogram("document_nodes", len(document))
            histogram("candidates_scored", len(scored.candidates))
        self.logger.info(
            "Extraction completed",
            uri=base_uri,
            primary_tag=document[primary.index].tag,
            score=round(primary.score, 3),
            merged_nodes=len(region.nodes),
            headline_stripped=headline is not None,
            body_only=body_only,
            content_length=len(content),
            elapsed=round(time.perf_counter() - started, 6),
        )
        return Article(
            title=title,
            content=content,
            text=text,
            headline_stripped=headline is not None,
            truncated=body_only,
            uri=base_uri,
        )

    def read_item(self, item: SourceItem, markup: Union[str, bytes], **kwargs: Any) -> Article:
        """Read ``markup`` fetched for ``item``, using its URI and title."""
        if kwargs.get("title_hint") is None:
            kwargs["title_hint"] = getattr(item, "title", None)
        return self.read(markup, item.uri, **kwargs)

    async def aread(self, markup: Union[str, bytes], base_uri: Optional[str] = None, **kwargs: Any) -> Article:
        """Run :meth:`read` in the default executor, off the event loop thread."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.read, markup, base_uri, **kwargs))

    async def aread_item(self, item: SourceItem, markup: Union[str, bytes], **kwargs: Any) -> Article:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.read_item, item, markup, **kwargs))


def read_article(markup: Union[str, bytes], base_uri: Optional[str] = None, **kwargs: Any) -> Article:
    """Extract an article with the default configuration."""
    return ArticleReader().read(markup, base_uri, **kwargs)
