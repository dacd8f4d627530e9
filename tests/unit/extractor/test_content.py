"""
Unit tests for ContentExtractor: sibling merging, cleanup, headline
stripping and output layout.
"""

import pytest

from pocketreader.config import ExtractionSettings, ScoringConfig
from pocketreader.extractor.content import ContentExtractor
from pocketreader.extractor.normalizer import Normalizer
from pocketreader.extractor.scorer import CandidateScorer
from pocketreader.parser import parse_document

LONG_PARAGRAPH = (
    "This paragraph has enough prose, with several clauses, commas, and plain words, "
    "that it scores as real article text rather than boilerplate."
)


@pytest.fixture
def scorer() -> CandidateScorer:
    return CandidateScorer(ScoringConfig())


@pytest.fixture
def extractor(scorer) -> ContentExtractor:
    return ContentExtractor(scorer, ExtractionSettings())


def run(scorer, extractor, markup):
    document = Normalizer().normalize(parse_document(markup))
    scored = scorer.score(document)
    primary = scorer.select_primary(scored)
    return extractor.extract(scored, primary)


def tags(region):
    return [region.document[i].tag for i in region.nodes]


class TestMergeSiblings:
    def test_primary_alone(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<body><div class="content"><p>{LONG_PARAGRAPH}</p></div><div class="menu"><a href="/">Home</a></div></body>',
        )
        assert region.nodes == [region.primary]

    def test_high_scoring_sibling_is_merged(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<body><div class="content"><p>{LONG_PARAGRAPH}</p></div><div><p>{LONG_PARAGRAPH}</p></div></body>',
        )
        assert tags(region) == ["div", "div"]
        assert region.nodes[0] == region.primary

    def test_plain_paragraph_sibling_is_merged(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<body><div class="content"><p>{LONG_PARAGRAPH}</p></div><p>It ended there.</p></body>',
        )
        assert tags(region) == ["div", "p"]

    def test_short_paragraph_without_sentence_end_is_not_merged(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<body><div class="content"><p>{LONG_PARAGRAPH}</p></div><p>Share this</p></body>',
        )
        assert tags(region) == ["div"]

    def test_linked_short_paragraph_is_not_merged(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<body><div class="content"><p>{LONG_PARAGRAPH}</p></div><p>Read <a href="/x">more</a>.</p></body>',
        )
        assert tags(region) == ["div"]

    def test_merged_nodes_keep_document_order(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<body><p>Before it all began.</p><div class="content"><p>{LONG_PARAGRAPH}</p></div></body>',
        )
        assert tags(region) == ["p", "div"]
        assert region.nodes[1] == region.primary


class TestCleanup:
    def test_link_dense_block_inside_primary_is_removed(self, scorer, extractor):
        links = " ".join(f'<a href="/{n}">Related story {n}</a>' for n in range(10))
        region = run(
            scorer,
            extractor,
            f'<div class="content"><p>{LONG_PARAGRAPH}</p><ul><li>{links}</li></ul></div>',
        )
        ul = region.document.find_first("ul")
        assert ul in region.excluded

    def test_negative_keyword_node_is_removed(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<div class="content"><p>{LONG_PARAGRAPH}</p><p class="share-buttons">Share it now.</p></div>',
        )
        share = [i for i in region.document.iter_elements("p") if region.document[i].attrs.get("class")]
        assert share[0] in region.excluded

    def test_empty_block_is_removed_but_media_kept(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<div class="content"><p>{LONG_PARAGRAPH}</p><div></div><figure><img src="a.png"></figure></div>',
        )
        document = region.document
        inner_div = list(document.iter_elements("div"))[1]
        assert inner_div in region.excluded
        assert document.find_first("figure") not in region.excluded

    def test_primary_is_never_removed(self, scorer, extractor):
        region = run(scorer, extractor, f'<div class="content comment"><p>{LONG_PARAGRAPH}</p></div>')
        assert region.primary not in region.excluded

    def test_long_link_heavy_block_is_removed(self, scorer, extractor):
        links = " ".join(f'<a href="/{n}">Mayor announces sweeping new budget plan for city {n}</a>' for n in range(10))
        region = run(
            scorer,
            extractor,
            f'<div class="content"><p>{LONG_PARAGRAPH}</p><div>{links} see also these stories here</div></div>',
        )
        link_block = list(region.document.iter_elements("div"))[1]
        assert link_block in region.excluded


class TestStripHeadline:
    def test_strips_first_h1_inside_region(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<div class="content"><h1>Headline</h1><p>{LONG_PARAGRAPH}</p><h1>Second</h1></div>',
        )
        first_h1 = region.document.find_first("h1")
        assert extractor.strip_headline(region) == first_h1
        assert first_h1 in region.excluded
        assert region.headline == first_h1

    def test_falls_back_to_h2(self, scorer, extractor):
        region = run(scorer, extractor, f'<div class="content"><h2>Sub</h2><p>{LONG_PARAGRAPH}</p></div>')
        assert extractor.strip_headline(region) == region.document.find_first("h2")

    def test_h1_wins_over_earlier_h2(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<div class="content"><h2>Kicker</h2><h1>Headline</h1><p>{LONG_PARAGRAPH}</p></div>',
        )
        assert extractor.strip_headline(region) == region.document.find_first("h1")

    def test_deeply_nested_heading_is_left_alone(self, scorer, extractor):
        region = run(
            scorer,
            extractor,
            f'<div class="content"><section><header><h1>Deep</h1></header></section><p>{LONG_PARAGRAPH}</p></div>',
        )
        assert extractor.strip_headline(region) is None
        assert region.headline is None


class TestLayout:
    MARKUP = (
        '<html><body><header><a href="/">Site</a></header>'
        f'<main id="layout"><div class="content"><p>{LONG_PARAGRAPH}</p></div><aside><p>Ads.</p></aside></main>'
        "<footer><p>Copyright.</p></footer></body></html>"
    )

    def test_body_only_renders_region(self, scorer, extractor):
        region = run(scorer, extractor, self.MARKUP)
        layout = extractor.layout(region, body_only=True)
        assert layout.roots == region.nodes
        assert layout.children == {}

    def test_full_layout_is_single_ancestor_chain(self, scorer, extractor):
        region = run(scorer, extractor, self.MARKUP)
        document = region.document
        layout = extractor.layout(region, body_only=False)
        html, body, main = (document.find_first(tag) for tag in ("html", "body", "main"))
        assert layout.roots == [html]
        assert layout.children == {html: [body], body: [main], main: region.nodes}

    def test_region_directly_under_root(self, scorer, extractor):
        region = run(scorer, extractor, f'<div class="content"><p>{LONG_PARAGRAPH}</p></div>')
        layout = extractor.layout(region, body_only=False)
        assert layout.roots == region.nodes

    def test_body_only_unwraps_page_wrappers(self, scorer, extractor):
        paragraphs = "".join(
            f"<p>Paragraph {n} reports that the council voted on Tuesday, after a long debate, to fund the line.</p>"
            for n in range(8)
        )
        region = run(scorer, extractor, f"<html><head><title>T</title></head><body>{paragraphs}</body></html>")
        document = region.document
        assert document[region.primary].tag == "body"

        layout = extractor.layout(region, body_only=True)
        assert layout.roots == list(document.iter_elements("p"))

        html, body = document.find_first("html"), document.find_first("body")
        full = extractor.layout(region, body_only=False)
        assert full.roots == [html]
        assert full.children == {html: [body]}
