"""
pocketreader content extraction.

Turns a parsed document into an Article in four steps:
1. Normalizer: drop scripts, styles, embeds and comments; decode entities; resolve links
2. CandidateScorer: score block-level nodes by text, link density and class/id hints
3. ContentExtractor: merge qualifying siblings, clean the region, shape the output
4. TitleExtractor and Renderer: pick the title and serialize the region

ArticleReader runs the whole sequence and is the entry point most callers need.
"""

from .content import ContentExtractor, ExtractedRegion, Layout
from .models import Article, Candidate
from .normalizer import Normalizer, resolve_uri
from .protocols import CancelSignal, SourceItem
from .reader import ArticleReader, read_article
from .renderer import Renderer
from .scorer import CandidateScorer, NodeStats, ScoredDocument
from .title import TitleExtractor

__all__ = [
    "Article",
    "ArticleReader",
    "CancelSignal",
    "Candidate",
    "CandidateScorer",
    "ContentExtractor",
    "ExtractedRegion",
    "Layout",
    "NodeStats",
    "Normalizer",
    "Renderer",
    "ScoredDocument",
    "SourceItem",
    "TitleExtractor",
    "read_article",
    "resolve_uri",
]
