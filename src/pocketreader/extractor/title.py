"""
Title extraction, independent of body extraction.
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import Iterable, Optional, Set

import structlog

from ..config.config import ExtractionSettings
from ..parser.tree import Document
from .normalizer import collapse_whitespace

logger = structlog.get_logger(__name__)


def longest_common_substring(a: str, b: str) -> int:
    """Length of the longest common substring of ``a`` and ``b``, ignoring case."""
    a, b = a.lower(), b.lower()
    match = SequenceMatcher(None, a, b, autojunk=False).find_longest_match(0, len(a), 0, len(b))
    return match.size


def _clean(text: str) -> str:
    return collapse_whitespace(text).strip()


class TitleExtractor:
    """Pick the article title.

    Sources, in priority order: an explicit hint (passed by the caller or
    carried in a hint attribute), the first ``h1`` inside the extracted
    region, then the document ``<title>`` with any site-name suffix removed.
    """

    def __init__(self, settings: Optional[ExtractionSettings] = None) -> None:
        self.settings = settings or ExtractionSettings()

    def extract(
        self,
        document: Document,
        region: Iterable[int] = (),
        *,
        excluded: Optional[Set[int]] = None,
        hint: Optional[str] = None,
    ) -> str:
        if hint and _clean(hint):
            return _clean(hint)

        attribute_hint = self.hint_attribute(document)
        if attribute_hint:
            return attribute_hint

        heading = self.region_heading(document, region, excluded or set())
        if heading:
            return heading

        title_element = document.find_first("title")
        if title_element is None:
            logger.debug("No title source found")
            return ""
        title = _clean(document.text_content(title_element))
        if not title:
            return ""

        chosen = self.document_heading(document)
        if not chosen:
            return title
        return self.strip_site_name(title, chosen)

    def hint_attribute(self, document: Document) -> str:
        names = self.settings.title_hint_attributes
        for index in document.iter_preorder():
            attrs = document[index].attrs
            for name in names:
                value = _clean(attrs.get(name, ""))
                if value:
                    return value
        return ""

    def region_heading(self, document: Document, region: Iterable[int], excluded: Set[int]) -> str:
        for root in region:
            stack = [root]
            while stack:
                index = stack.pop()
                if index in excluded:
                    continue
                if document[index].tag == "h1":
                    text = _clean(document.text_content(index))
                    if text:
                        return text
                stack.extend(reversed(document[index].children))
        return ""

    def document_heading(self, document: Document) -> str:
        for level in ("h1", "h2"):
            for index in document.iter_elements(level):
                text = _clean(document.text_content(index))
                if text:
                    return text
        return ""

    def strip_site_name(self, title: str, heading: str) -> str:
        """Drop the title segment that overlaps least with ``heading``.

        Only the first delimiter present in the title is used. Among equally
        poor segments the last one is dropped.
        """
        for delimiter in self.settings.title_delimiters:
            if delimiter not in title:
                continue
            segments = [segment.strip() for segment in title.split(delimiter)]
            segments = [segment for segment in segments if segment]
            if len(segments) < 2:
                continue
            overlaps = [longest_common_substring(segment, heading) for segment in segments]
            weakest = min(overlaps)
            drop = len(overlaps) - 1 - overlaps[::-1].index(weakest)
            return delimiter.join(segment for position, segment in enumerate(segments) if position != drop)
        return title
