"""
Candidate scorer.

Every block-level node named in ``ScoringConfig.base_weights`` is scored as

    baseWeight(tag) + textScore(node) * (1 - linkDensity(node)) + keywordBonus(class, id)

and a fraction of each node's own score is credited to its parent and
grandparent, so a container of good paragraphs outranks any single one of
them. All constants come from the configuration passed in; nothing here
hard-codes a heuristic value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

import structlog

from ..config.config import ScoringConfig
from ..errors import ExtractionError
from ..parser.tree import Document, Node
from .models import Candidate

logger = structlog.get_logger(__name__)

MEDIA_ELEMENTS: FrozenSet[str] = frozenset({"img", "picture", "video", "audio", "svg", "canvas", "math"})
_COMMAS = (",", "，", "、")


@dataclass(slots=True)
class NodeStats:
    """Text measurements for one subtree.

    ``own_length`` and ``own_commas`` cover the node's own text: text nodes
    and inline descendants, but not text nested inside another scored block.
    """

    text_length: int = 0
    link_length: int = 0
    own_length: int = 0
    own_commas: int = 0
    has_media: bool = False

    @property
    def link_density(self) -> float:
        if not self.text_length:
            return 0.0
        return self.link_length / self.text_length

    @property
    def plain_length(self) -> int:
        return self.text_length - self.link_length


def measure(document: Document, block_tags: FrozenSet[str]) -> Dict[int, NodeStats]:
    """Compute ``NodeStats`` for every attached node in one bottom-up pass."""
    stats: Dict[int, NodeStats] = {}
    for index in reversed(list(document.iter_preorder())):
        node = document[index]
        current = NodeStats()
        if node.is_text:
            text = node.text.strip()
            current.text_length = current.own_length = len(text)
            current.own_commas = sum(text.count(comma) for comma in _COMMAS)
        else:
            for child in node.children:
                child_stats = stats[child]
                current.text_length += child_stats.text_length
                current.link_length += child_stats.link_length
                current.has_media = current.has_media or child_stats.has_media
                if document[child].tag not in block_tags:
                    current.own_length += child_stats.own_length
                    current.own_commas += child_stats.own_commas
            if node.tag == "a":
                current.link_length = current.text_length
            if node.tag in MEDIA_ELEMENTS:
                current.has_media = True
        stats[index] = current
    return stats


@dataclass
class ScoredDocument:
    """A normalized document together with its measurements and candidates."""

    document: Document
    stats: Dict[int, NodeStats]
    candidates: Dict[int, Candidate] = field(default_factory=dict)
    order: List[int] = field(default_factory=list)

    def score_of(self, index: int) -> float:
        candidate = self.candidates.get(index)
        return candidate.score if candidate is not None else 0.0


class CandidateScorer:
    """Score block-level nodes and pick the primary candidate."""

    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig()
        self.block_tags: FrozenSet[str] = frozenset(self.config.base_weights)

    def text_score(self, stats: NodeStats) -> float:
        """Reward own text length and comma-delimited clauses, saturating at ``max_text_score``."""
        if not stats.own_length:
            return 0.0
        length_points = min(stats.own_length / self.config.chars_per_point, self.config.max_length_points)
        return min(1.0 + stats.own_commas + length_points, self.config.max_text_score)

    def keyword_bonus(self, node: Node) -> float:
        hints = node.class_and_id
        if not hints:
            return 0.0
        bonus = 0.0
        if any(keyword in hints for keyword in self.config.positive_keywords):
            bonus += self.config.keyword_bonus
        if any(keyword in hints for keyword in self.config.negative_keywords):
            bonus -= self.config.keyword_bonus
        return bonus

    def is_negative(self, node: Node) -> bool:
        hints = node.class_and_id
        return bool(hints) and any(keyword in hints for keyword in self.config.negative_keywords)

    def score(self, document: Document) -> ScoredDocument:
        stats = measure(document, self.block_tags)
        scored = ScoredDocument(document=document, stats=stats, order=list(document.iter_preorder()))

        blocks: List[Candidate] = []
        for index in scored.order:
            node = document[index]
            if node.tag not in self.block_tags:
                continue
            node_stats = stats[index]
            candidate = Candidate(
                index=index,
                base_weight=self.config.base_weights[node.tag],
                text_score=self.text_score(node_stats),
                link_density=node_stats.link_density,
                keyword_bonus=self.keyword_bonus(node),
                eligible=node_stats.plain_length > 0,
            )
            scored.candidates[index] = candidate
            blocks.append(candidate)

        for candidate in blocks:
            own = candidate.own_score
            if not own:
                continue
            parent = document[candidate.index].parent
            if parent is None or not document[parent].is_element:
                continue
            self._candidate(scored, parent).propagated += own * self.config.parent_fraction
            grandparent = document[parent].parent
            if grandparent is not None and document[grandparent].is_element:
                self._candidate(scored, grandparent).propagated += own * self.config.grandparent_fraction

        logger.debug("Scored candidates", candidates=len(scored.candidates), blocks=len(blocks))
        return scored

    def _candidate(self, scored: ScoredDocument, index: int) -> Candidate:
        """Return the candidate for ``index``, creating an unweighted one for non-block ancestors."""
        candidate = scored.candidates.get(index)
        if candidate is None:
            node_stats = scored.stats[index]
            candidate = Candidate(
                index=index,
                link_density=node_stats.link_density,
                eligible=node_stats.plain_length > 0,
            )
            scored.candidates[index] = candidate
        return candidate

    def select_primary(self, scored: ScoredDocument) -> Candidate:
        """Return the highest-scoring eligible candidate; the earliest wins a tie.

        Raises:
            ExtractionError: if no eligible candidate reaches ``min_score``.
        """
        best: Optional[Candidate] = None
        for index in scored.order:
            candidate = scored.candidates.get(index)
            if candidate is None or not candidate.eligible:
                continue
            if best is None or candidate.score > best.score:
                best = candidate

        best_score = best.score if best is not None else 0.0
        if best is None or best_score < self.config.min_score:
            raise ExtractionError(
                f"No candidate reached the minimum score ({best_score:.2f} < {self.config.min_score:.2f})",
                best_score=best_score,
                min_score=self.config.min_score,
            )
        return best
