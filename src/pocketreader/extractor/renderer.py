"""
Serialize a selection of the arena tree back to an HTML fragment.
"""

from __future__ import annotations

from html import escape
from typing import AbstractSet, Dict, Iterable, List, Optional, Tuple

from ..parser.rules import ESCAPABLE_RAW_TEXT_ELEMENTS, INLINE_ELEMENTS, RAW_TEXT_ELEMENTS, VOID_ELEMENTS
from ..parser.tree import COMMENT, DOCUMENT, Document

_VERBATIM_PARENTS = RAW_TEXT_ELEMENTS - ESCAPABLE_RAW_TEXT_ELEMENTS


def escape_text(text: str) -> str:
    return escape(text, quote=False)


def format_attributes(attrs: Dict[str, str]) -> str:
    return "".join(f' {name}="{escape(value, quote=True)}"' for name, value in attrs.items())


class Renderer:
    """Deterministic serializer: same tree and selection, same output."""

    def render(
        self,
        document: Document,
        roots: Iterable[int],
        *,
        exclude: AbstractSet[int] = frozenset(),
        children: Optional[Dict[int, List[int]]] = None,
    ) -> str:
        """Render ``roots`` in order.

        Args:
            document: Tree to read from
            roots: Nodes to serialize, each with its subtree
            exclude: Nodes skipped together with their subtrees
            children: Per-node replacement child lists, used to prune branches

        Returns:
            The HTML fragment
        """
        overrides = children or {}
        parts: List[str] = []
        # (index, closing) pairs; closing entries emit an element's end tag.
        stack: List[Tuple[int, bool]] = [(root, False) for root in reversed(list(roots))]
        while stack:
            index, closing = stack.pop()
            node = document[index]
            if closing:
                parts.append(f"</{node.tag}>")
                continue
            if index in exclude:
                continue
            if node.is_text:
                parent_tag = document[node.parent].tag if node.parent is not None else ""
                parts.append(node.text if parent_tag in _VERBATIM_PARENTS else escape_text(node.text))
                continue
            if node.tag == COMMENT:
                parts.append(f"<!--{node.text}-->")
                continue
            if node.tag != DOCUMENT:
                parts.append(f"<{node.tag}{format_attributes(node.attrs)}>")
                if node.tag in VOID_ELEMENTS:
                    continue
                stack.append((index, True))
            child_list = overrides.get(index, node.children)
            stack.extend((child, False) for child in reversed(child_list))
        return "".join(parts)

    def render_text(self, document: Document, roots: Iterable[int], *, exclude: AbstractSet[int] = frozenset()) -> str:
        """Plain text of ``roots``, whitespace collapsed."""
        pieces = []
        for root in roots:
            stack = [root]
            while stack:
                index = stack.pop()
                if index in exclude:
                    continue
                node = document[index]
                if node.is_text:
                    pieces.append(node.text)
                elif node.is_element and node.tag not in INLINE_ELEMENTS:
                    pieces.append(" ")
                stack.extend(reversed(node.children))
        return " ".join("".join(pieces).split())
