"""
Tree builder: turns a token stream into an arena ``Document``.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

import structlog

from .decoding import decode_document
from .rules import (
    FOREIGN_ELEMENTS,
    INLINE_ELEMENTS,
    SINGLETON_ELEMENTS,
    VOID_ELEMENTS,
    ImplicitClose,
    closes_inline,
    implicit_close_rules,
)
from .tokenizer import Token, TokenKind, tokenize
from .tree import COMMENT, TEXT, Document, Node

logger = structlog.get_logger(__name__)


class TreeBuilder:
    """Consume tokens and maintain the stack of open elements."""

    def __init__(self, document: Optional[Document] = None) -> None:
        self.document = document if document is not None else Document()
        self.stack: List[int] = [self.document.root]

    @property
    def current(self) -> int:
        return self.stack[-1]

    def feed(self, tokens: Iterable[Token]) -> Document:
        for token in tokens:
            if token.kind is TokenKind.START_TAG:
                self._start_tag(token)
            elif token.kind is TokenKind.END_TAG:
                self._end_tag(token.data)
            elif token.kind is TokenKind.TEXT:
                self._text(token.data)
            elif token.kind is TokenKind.COMMENT:
                self.document.add(Node(COMMENT, text=token.data), self.current)
            elif token.kind is TokenKind.DOCTYPE and self.document.doctype is None:
                self.document.doctype = token.data
        return self.finish()

    def finish(self) -> Document:
        """Close every element still open, innermost first."""
        del self.stack[1:]
        return self.document

    def _text(self, data: str) -> None:
        parent = self.document[self.current]
        if parent.children:
            last = self.document[parent.children[-1]]
            if last.is_text:
                last.text += data
                return
        self.document.add(Node(TEXT, text=data), self.current)

    def _start_tag(self, token: Token) -> None:
        tag = token.data
        if tag in SINGLETON_ELEMENTS:
            existing = next((i for i in self.stack if self.document[i].tag == tag), None)
            if existing is not None:
                attrs = self.document[existing].attrs
                for name, value in token.attrs.items():
                    attrs.setdefault(name, value)
                return

        if closes_inline(tag):
            self._close_inline()
        for rule in implicit_close_rules(tag):
            self._apply(rule)

        index = self.document.add(Node(tag, attrs=dict(token.attrs)), self.current)
        if tag in VOID_ELEMENTS:
            return
        if token.self_closing and self._in_foreign_content():
            return
        self.stack.append(index)

    def _end_tag(self, tag: str) -> None:
        for depth in range(len(self.stack) - 1, 0, -1):
            if self.document[self.stack[depth]].tag == tag:
                del self.stack[depth:]
                return
        logger.debug("Ignoring unmatched end tag", tag=tag)

    def _close_inline(self) -> None:
        while len(self.stack) > 1 and self.document[self.current].tag in INLINE_ELEMENTS:
            self.stack.pop()

    def _apply(self, rule: ImplicitClose) -> None:
        target = None
        for depth in range(len(self.stack) - 1, 0, -1):
            tag = self.document[self.stack[depth]].tag
            if tag in rule.boundary:
                break
            if tag in rule.closes:
                target = depth
            if rule.top_only:
                break
        if target is not None:
            del self.stack[target:]
            self._close_inline()

    def _in_foreign_content(self) -> bool:
        return any(self.document[i].tag in FOREIGN_ELEMENTS for i in self.stack)


def parse_document(
    markup: Union[str, bytes],
    base_uri: Optional[str] = None,
    *,
    encoding: Optional[str] = None,
) -> Document:
    """Parse ``markup`` into a ``Document``.

    Bytes are decoded first (see :func:`decode_document`); that is the only
    step that can fail. Malformed markup is always recovered.
    """
    text, detected = decode_document(markup, encoding)
    document = Document(base_uri=base_uri, encoding=detected)
    return TreeBuilder(document).feed(tokenize(text))
