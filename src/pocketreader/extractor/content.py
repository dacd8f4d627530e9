"""
Content extractor: grows the primary candidate into the article region and
removes residual boilerplate from it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

import structlog

from ..config.config import ExtractionSettings
from ..parser.rules import BLOCK_ELEMENTS, VOID_ELEMENTS
from ..parser.tree import Document
from .models import Candidate
from .scorer import CandidateScorer, ScoredDocument

logger = structlog.get_logger(__name__)

# Containers that the link-density cleanup may remove.
CLEANABLE_ELEMENTS: FrozenSet[str] = frozenset(
    {"aside", "div", "dl", "figure", "footer", "form", "header", "li", "menu", "nav", "ol", "p", "section", "table", "ul"}
)
HEADLINE_LEVELS: Tuple[str, ...] = ("h1", "h2")
# Never rendered themselves in body-only output; their children take their place.
PAGE_WRAPPERS: FrozenSet[str] = frozenset({"html", "body"})
_SENTENCE_END_RE = re.compile(r"[.!?]([\s\"')\]]|$)")


@dataclass
class ExtractedRegion:
    """The merged article region and everything removed from inside it."""

    document: Document
    primary: int
    parent: Optional[int]
    nodes: List[int]
    excluded: Set[int] = field(default_factory=set)
    headline: Optional[int] = None


@dataclass
class Layout:
    """What to render: root nodes plus per-node child overrides."""

    roots: List[int]
    children: Dict[int, List[int]] = field(default_factory=dict)


class ContentExtractor:
    """Merge qualifying siblings into the primary candidate and clean the result."""

    def __init__(self, scorer: CandidateScorer, settings: Optional[ExtractionSettings] = None) -> None:
        self.scorer = scorer
        self.settings = settings or ExtractionSettings()

    @property
    def link_density_cutoff(self) -> float:
        return self.scorer.config.link_density_cutoff

    def extract(self, scored: ScoredDocument, primary: Candidate) -> ExtractedRegion:
        document = scored.document
        nodes = self.merge_siblings(scored, primary)
        region = ExtractedRegion(
            document=document,
            primary=primary.index,
            parent=document[primary.index].parent,
            nodes=nodes,
        )
        region.excluded = self.cleanup(scored, region)
        logger.debug(
            "Extracted region",
            primary=primary.index,
            score=round(primary.score, 3),
            merged=len(nodes) - 1,
            excluded=len(region.excluded),
        )
        return region

    def merge_siblings(self, scored: ScoredDocument, primary: Candidate) -> List[int]:
        """Return the primary plus every qualifying sibling, in document order."""
        document = scored.document
        parent = document[primary.index].parent
        if parent is None:
            return [primary.index]

        threshold = primary.score * self.settings.sibling_score_fraction
        merged = []
        for sibling in document[parent].children:
            if sibling == primary.index:
                merged.append(sibling)
                continue
            if not document[sibling].is_element:
                continue
            sibling_score = scored.score_of(sibling)
            if sibling_score > 0 and sibling_score >= threshold:
                merged.append(sibling)
            elif self._is_plain_paragraph(scored, sibling):
                merged.append(sibling)
        return merged

    def _is_plain_paragraph(self, scored: ScoredDocument, index: int) -> bool:
        if scored.document[index].tag != "p":
            return False
        stats = scored.stats[index]
        if stats.text_length > self.settings.sibling_min_text_length:
            return stats.link_density < self.link_density_cutoff
        if stats.text_length == 0 or stats.link_length:
            return False
        return _SENTENCE_END_RE.search(scored.document.text_content(index).strip()) is not None

    def cleanup(self, scored: ScoredDocument, region: ExtractedRegion) -> Set[int]:
        """Find link-dense, empty and negatively hinted nodes inside the region.

        The primary node is never removed; removal of a node covers its subtree.
        """
        document = scored.document
        excluded: Set[int] = set()
        stack = list(reversed(region.nodes))
        while stack:
            index = stack.pop()
            node = document[index]
            if not node.is_element:
                continue
            if index != region.primary and self._is_boilerplate(scored, index):
                excluded.add(index)
                continue
            stack.extend(reversed(node.children))
        return excluded

    def _is_boilerplate(self, scored: ScoredDocument, index: int) -> bool:
        node = scored.document[index]
        stats = scored.stats[index]
        if self.scorer.is_negative(node):
            return True
        if node.tag in BLOCK_ELEMENTS and node.tag not in VOID_ELEMENTS:
            if stats.text_length == 0 and not stats.has_media:
                return True
        return (
            node.tag in CLEANABLE_ELEMENTS
            and stats.link_density > self.link_density_cutoff
            and stats.plain_length < self.settings.cleanup_min_text_length
        )

    def strip_headline(self, region: ExtractedRegion) -> Optional[int]:
        """Exclude the first ``h1`` (else ``h2``) at or directly inside the region."""
        document = region.document
        for level in HEADLINE_LEVELS:
            for root in region.nodes:
                if root in region.excluded:
                    continue
                if document[root].tag == level:
                    region.headline = root
                    break
                found = next(
                    (
                        child
                        for child in document[root].children
                        if document[child].tag == level and child not in region.excluded
                    ),
                    None,
                )
                if found is not None:
                    region.headline = found
                    break
            if region.headline is not None:
                region.excluded.add(region.headline)
                return region.headline
        return None

    def layout(self, region: ExtractedRegion, body_only: bool) -> Layout:
        """Decide which nodes to render.

        With ``body_only`` only the region nodes are rendered, with ``html`` and
        ``body`` roots replaced by their children. Otherwise the
        chain of ancestors from the document root down to the region is kept,
        each ancestor reduced to the single child on that chain.
        """
        if body_only or region.parent is None:
            return Layout(roots=self._unwrap(region.document, region.nodes))

        document = region.document
        path = [region.parent, *document.ancestors(region.parent)]
        path.reverse()
        if path[0] == document.root:
            path = path[1:]
        if not path:
            return Layout(roots=list(region.nodes))

        children = {ancestor: [descendant] for ancestor, descendant in zip(path, path[1:])}
        children[path[-1]] = list(region.nodes)
        return Layout(roots=[path[0]], children=children)

    @staticmethod
    def _unwrap(document: Document, roots: List[int]) -> List[int]:
        unwrapped: List[int] = []
        stack = list(reversed(roots))
        while stack:
            index = stack.pop()
            if document[index].tag in PAGE_WRAPPERS:
                stack.extend(child for child in reversed(document[index].children) if document[child].tag != "head")
            else:
                unwrapped.append(index)
        return unwrapped
