"""
pocketreader - Article extraction for saved web pages.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .errors import Cancelled, ExtractionError, ParseError, ReaderError
from .extractor import Article, ArticleReader, read_article

__all__ = [
    "__version__",
    "Article",
    "ArticleReader",
    "Cancelled",
    "Config",
    "ExtractionError",
    "ParseError",
    "ReaderError",
    "read_article",
]
