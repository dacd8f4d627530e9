"""
Document normalization: the pruning pass that runs once after parsing.
"""

from __future__ import annotations

import html
import re
import unicodedata
from typing import Optional, Tuple
from urllib.parse import urljoin, urlsplit

import structlog

from ..parser.rules import ESCAPABLE_RAW_TEXT_ELEMENTS, RAW_TEXT_ELEMENTS
from ..parser.tree import COMMENT, Document

logger = structlog.get_logger(__name__)

REMOVED_ELEMENTS = frozenset({"script", "style", "noscript", "iframe", "object", "embed", "template"})
URI_ATTRIBUTES: Tuple[str, ...] = ("href", "src")
PRESERVE_WHITESPACE = frozenset({"pre", "textarea"})
_UNESCAPED_CONTENT = RAW_TEXT_ELEMENTS - ESCAPABLE_RAW_TEXT_ELEMENTS
_WHITESPACE_RE = re.compile(r"\s+")


def decode_entities(value: str) -> str:
    """Decode character references and normalize to NFC."""
    return unicodedata.normalize("NFC", html.unescape(value))


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value)


def resolve_uri(value: str, base_uri: Optional[str]) -> str:
    """Resolve ``value`` against ``base_uri`` when it is syntactically relative.

    The value is returned unchanged when there is no usable absolute base,
    when it is empty or a fragment-only reference, when it already has a
    scheme, or when either URI cannot be parsed.
    """
    if not base_uri or not value or value.startswith("#"):
        return value
    try:
        if not urlsplit(base_uri).scheme or urlsplit(value).scheme:
            return value
        return urljoin(base_uri, value)
    except ValueError:
        return value


class Normalizer:
    """Strip non-content nodes, decode entities, resolve links, collapse whitespace."""

    def __init__(self, removed_elements: frozenset[str] = REMOVED_ELEMENTS) -> None:
        self.removed_elements = removed_elements

    def effective_base_uri(self, document: Document) -> Optional[str]:
        """Combine the caller's base URI with the first ``<base href>``, if any."""
        base_element = document.find_first("base")
        if base_element is None:
            return document.base_uri
        href = decode_entities(document[base_element].attrs.get("href", "")).strip()
        if not href:
            return document.base_uri
        if document.base_uri:
            return resolve_uri(href, document.base_uri)
        try:
            return href if urlsplit(href).scheme else None
        except ValueError:
            return None

    def normalize(self, document: Document) -> Document:
        base_uri = self.effective_base_uri(document)
        document.base_uri = base_uri
        removed = 0

        stack = [(document.root, False)]
        while stack:
            index, preserve = stack.pop()
            node = document[index]
            if node.tag == COMMENT or node.tag in self.removed_elements:
                document.detach(index)
                removed += 1
                continue
            if node.is_text:
                parent_tag = document[node.parent].tag if node.parent is not None else ""
                text = node.text if parent_tag in _UNESCAPED_CONTENT else decode_entities(node.text)
                node.text = text if preserve else collapse_whitespace(text)
                continue
            if node.is_element:
                for name, value in node.attrs.items():
                    value = decode_entities(value)
                    if name in URI_ATTRIBUTES:
                        value = resolve_uri(value.strip(), base_uri)
                    node.attrs[name] = value
            child_preserve = preserve or node.tag in PRESERVE_WHITESPACE
            stack.extend((child, child_preserve) for child in reversed(node.children))

        logger.debug("Normalized document", removed_nodes=removed, base_uri=base_uri)
        return document
