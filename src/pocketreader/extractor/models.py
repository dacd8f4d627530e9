"""
Data models for scoring and extraction results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class Candidate:
    """A scored node with its weight contributions kept apart."""

    index: int
    base_weight: float = 0.0
    text_score: float = 0.0
    link_density: float = 0.0
    keyword_bonus: float = 0.0
    propagated: float = 0.0
    eligible: bool = False

    @property
    def link_penalty(self) -> float:
        """Share of the text score removed by link density."""
        return self.text_score * self.link_density

    @property
    def own_score(self) -> float:
        return max(0.0, self.base_weight + self.text_score - self.link_penalty + self.keyword_bonus)

    @property
    def score(self) -> float:
        return self.own_score + self.propagated


@dataclass(slots=True, frozen=True)
class Article:
    """Result of extracting an article from one document."""

    title: str
    content: str
    text: str = ""
    headline_stripped: bool = False
    truncated: bool = False
    uri: Optional[str] = None
