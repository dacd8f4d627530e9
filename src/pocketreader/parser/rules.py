"""
Element classes and implicit-closing rules for the tag-soup tree builder.

Everything the builder needs to recover from malformed markup lives here as
plain data, so recovery behaviour can be inspected and tested without
running the builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

VOID_ELEMENTS: FrozenSet[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Content of these elements is text up to the matching end tag.
RAW_TEXT_ELEMENTS: FrozenSet[str] = frozenset(
    {"script", "style", "xmp", "iframe", "noembed", "noframes", "noscript", "textarea", "title"}
)

# Raw text elements whose content still carries character references.
ESCAPABLE_RAW_TEXT_ELEMENTS: FrozenSet[str] = frozenset({"textarea", "title"})

HEADINGS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")

BLOCK_ELEMENTS: FrozenSet[str] = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "center",
        "dd",
        "details",
        "dialog",
        "dir",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "header",
        "hgroup",
        "hr",
        "li",
        "listing",
        "main",
        "menu",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "summary",
        "table",
        "ul",
        *HEADINGS,
    }
)

INLINE_ELEMENTS: FrozenSet[str] = frozenset(
    {
        "a",
        "abbr",
        "acronym",
        "b",
        "bdi",
        "bdo",
        "big",
        "cite",
        "code",
        "del",
        "dfn",
        "em",
        "font",
        "i",
        "ins",
        "kbd",
        "label",
        "mark",
        "nobr",
        "q",
        "s",
        "samp",
        "small",
        "span",
        "strike",
        "strong",
        "sub",
        "sup",
        "time",
        "tt",
        "u",
        "var",
    }
)

# Opening one of these more than once merges attributes instead of nesting.
SINGLETON_ELEMENTS: FrozenSet[str] = frozenset({"html", "head", "body"})

# Inside these, a self-closing start tag does not open an element.
FOREIGN_ELEMENTS: FrozenSet[str] = frozenset({"svg", "math"})

# Scope markers that stop the search for an element to close.
_DEFAULT_SCOPE: FrozenSet[str] = frozenset(
    {"applet", "button", "caption", "html", "marquee", "object", "table", "td", "th", "template"}
)


@dataclass(frozen=True)
class ImplicitClose:
    """Open elements closed by a start tag before it is inserted.

    The open-element stack is searched top-down until a tag in ``boundary``;
    the outermost element in ``closes`` found before it is closed along with
    everything opened inside it. With ``top_only`` only the current node is
    inspected.
    """

    closes: FrozenSet[str]
    boundary: FrozenSet[str] = _DEFAULT_SCOPE
    top_only: bool = False


_LIST_SCOPE = _DEFAULT_SCOPE | {"ol", "ul", "menu", "dir"}
_TABLE_SCOPE = frozenset({"html", "table", "template"})

IMPLICIT_CLOSE: Dict[str, ImplicitClose] = {
    "p": ImplicitClose(closes=frozenset({"p"})),
    "li": ImplicitClose(closes=frozenset({"li"}), boundary=_LIST_SCOPE),
    "dt": ImplicitClose(closes=frozenset({"dt", "dd"}), boundary=_DEFAULT_SCOPE | {"dl"}),
    "dd": ImplicitClose(closes=frozenset({"dt", "dd"}), boundary=_DEFAULT_SCOPE | {"dl"}),
    "option": ImplicitClose(closes=frozenset({"option"}), top_only=True),
    "optgroup": ImplicitClose(closes=frozenset({"optgroup", "option"}), boundary=frozenset({"select", "html"})),
    "tr": ImplicitClose(closes=frozenset({"tr", "td", "th"}), boundary=_TABLE_SCOPE | {"tbody", "thead", "tfoot"}),
    "td": ImplicitClose(closes=frozenset({"td", "th"}), boundary=_TABLE_SCOPE | {"tr"}),
    "th": ImplicitClose(closes=frozenset({"td", "th"}), boundary=_TABLE_SCOPE | {"tr"}),
    "thead": ImplicitClose(closes=frozenset({"thead", "tbody", "tfoot", "tr", "td", "th"}), boundary=_TABLE_SCOPE),
    "tbody": ImplicitClose(closes=frozenset({"thead", "tbody", "tfoot", "tr", "td", "th"}), boundary=_TABLE_SCOPE),
    "tfoot": ImplicitClose(closes=frozenset({"thead", "tbody", "tfoot", "tr", "td", "th"}), boundary=_TABLE_SCOPE),
    "body": ImplicitClose(closes=frozenset({"head"}), boundary=frozenset({"html"})),
    **{h: ImplicitClose(closes=frozenset(HEADINGS), top_only=True) for h in HEADINGS},
}

# Every block-level start additionally closes an open paragraph in scope.
BLOCK_CLOSES_PARAGRAPH = ImplicitClose(closes=frozenset({"p"}))


def implicit_close_rules(tag: str) -> Tuple[ImplicitClose, ...]:
    """Return the closing rules applied, in order, before ``tag`` opens."""
    rules = []
    if tag in IMPLICIT_CLOSE:
        rules.append(IMPLICIT_CLOSE[tag])
    if tag in BLOCK_ELEMENTS and tag != "p":
        rules.append(BLOCK_CLOSES_PARAGRAPH)
    return tuple(rules)


def closes_inline(tag: str) -> bool:
    """Whether opening ``tag`` closes inline elements left open on the stack."""
    return tag in BLOCK_ELEMENTS
