"""
Shared fixtures for pocketreader tests.

Provides sample documents and reader instances built on an isolated
configuration so no test depends on a config file in the working directory.
"""

from __future__ import annotations

import pytest

from pocketreader.config import Config
from pocketreader.extractor import ArticleReader
from pocketreader.parser import Document, parse_document

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Sample Documents
# ============================================================================

ARTICLE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Breaking News - Acme Times</title>
  <script>var banner = "<p>not content</p>";</script>
  <style>p { color: red; }</style>
</head>
<body>
  <nav class="site-nav">
    <a href="/">Home</a> <a href="/world">World</a> <a href="/sports">Sports</a>
  </nav>
  <div id="wrapper">
    <div class="article-content">
      <h1>Breaking News</h1>
      <p>The city council voted on Tuesday, after a long and heated debate, to approve the new
         transit plan, which adds three bus lines, two bike corridors, and a night service.</p>
      <p>Supporters said the plan, years in the making, would cut commute times across the region.
         Critics, however, argued that the <a href="/budget">budget</a> was far too optimistic.</p>
      <!-- tracking pixel removed -->
      <p>Construction is expected to begin next spring, and the first line should open in two years,
         according to the transit authority, which will publish a detailed schedule.</p>
      <img src="images/map.png" alt="Route map">
    </div>
    <div class="sidebar">
      <ul>
        <li><a href="/related/1">Related story number one</a></li>
        <li><a href="/related/2">Related story number two</a></li>
        <li><a href="/related/3">Related story number three</a></li>
      </ul>
    </div>
  </div>
  <footer id="footer"><p>Copyright Acme Times.</p></footer>
</body>
</html>
"""

NAVIGATION_ONLY_HTML = """<html><body>
<nav><a href="/">Home</a><a href="/news">News</a><a href="/about">About</a></nav>
</body></html>"""

LINK_DENSE_HTML = """<html><body>
<div class="article-content">
  <p>The first paragraph of the story carries plenty of prose, with commas, clauses, and detail,
     so that the container is clearly the main content of this page.</p>
  <p>The second paragraph continues the story, adding context, quotes, and background that a
     reader would expect to find in a proper article body.</p>
  <div class="more">
    <a href="/1">Link number one</a> <a href="/2">Link number two</a> <a href="/3">Link number three</a>
    <a href="/4">Link number four</a> <a href="/5">Link number five</a> <a href="/6">Link number six</a>
    <a href="/7">Link number seven</a> <a href="/8">Link number eight</a> <a href="/9">Link number nine</a>
    <a href="/10">Link number ten</a> see also these other stories
  </div>
</div>
</body></html>"""

BASE_URI = "https://news.example.com/2024/story.html"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def config() -> Config:
    """Default configuration, built without reading any config file."""
    return Config()


@pytest.fixture
def reader(config: Config) -> ArticleReader:
    return ArticleReader(config)


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def navigation_only_html() -> str:
    return NAVIGATION_ONLY_HTML


@pytest.fixture
def link_dense_html() -> str:
    return LINK_DENSE_HTML


@pytest.fixture
def article_document() -> Document:
    return parse_document(ARTICLE_HTML, BASE_URI)
