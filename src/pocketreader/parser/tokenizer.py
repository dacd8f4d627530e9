"""
Single-pass state-machine tokenizer for tag soup.

The tokenizer never rejects input. Unterminated constructs at end of input
are flushed as whatever they most plausibly were, malformed attributes are
dropped while their element is kept, and a stray ``<`` is literal text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional

from .rules import RAW_TEXT_ELEMENTS


class TokenKind(Enum):
    """Kinds of token produced by the tokenizer."""

    START_TAG = "start_tag"
    END_TAG = "end_tag"
    TEXT = "text"
    COMMENT = "comment"
    DOCTYPE = "doctype"


class State(Enum):
    """Tokenizer states."""

    DATA = "data"
    RAW_TEXT = "raw_text"
    TAG_OPEN = "tag_open"
    END_TAG_OPEN = "end_tag_open"
    TAG_NAME = "tag_name"
    BEFORE_ATTRIBUTE_NAME = "before_attribute_name"
    ATTRIBUTE_NAME = "attribute_name"
    AFTER_ATTRIBUTE_NAME = "after_attribute_name"
    BEFORE_ATTRIBUTE_VALUE = "before_attribute_value"
    ATTRIBUTE_VALUE_DOUBLE_QUOTED = "attribute_value_double_quoted"
    ATTRIBUTE_VALUE_SINGLE_QUOTED = "attribute_value_single_quoted"
    ATTRIBUTE_VALUE_UNQUOTED = "attribute_value_unquoted"
    SELF_CLOSING_START_TAG = "self_closing_start_tag"
    MARKUP_DECLARATION = "markup_declaration"
    COMMENT = "comment"
    BOGUS_COMMENT = "bogus_comment"
    DOCTYPE = "doctype"


@dataclass(slots=True)
class Token:
    kind: TokenKind
    data: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    self_closing: bool = False


WHITESPACE = " \t\n\r\f"
_TAG_NAME_RE = re.compile(r"[^\s/>]+")
_ATTRIBUTE_NAME_RE = re.compile(r"[^\s/>=]+")
_UNQUOTED_VALUE_RE = re.compile(r"[^\s>]+")
_INVALID_NAME_CHARS = frozenset("\"'<")
_INVALID_UNQUOTED_CHARS = frozenset("\"'<`")


class Tokenizer:
    """Iterate over the tokens of an HTML string."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.state = State.DATA
        self._pending: List[Token] = []
        self._tag: Optional[Token] = None
        self._attr_name = ""
        self._attr_value = ""
        self._attr_malformed = False
        self._raw_end: Optional[re.Pattern[str]] = None
        self._handlers: Dict[State, Callable[[], None]] = {
            State.DATA: self._data,
            State.RAW_TEXT: self._raw_text,
            State.TAG_OPEN: self._tag_open,
            State.END_TAG_OPEN: self._end_tag_open,
            State.TAG_NAME: self._tag_name,
            State.BEFORE_ATTRIBUTE_NAME: self._before_attribute_name,
            State.ATTRIBUTE_NAME: self._attribute_name,
            State.AFTER_ATTRIBUTE_NAME: self._after_attribute_name,
            State.BEFORE_ATTRIBUTE_VALUE: self._before_attribute_value,
            State.ATTRIBUTE_VALUE_DOUBLE_QUOTED: lambda: self._quoted_value('"'),
            State.ATTRIBUTE_VALUE_SINGLE_QUOTED: lambda: self._quoted_value("'"),
            State.ATTRIBUTE_VALUE_UNQUOTED: self._unquoted_value,
            State.SELF_CLOSING_START_TAG: self._self_closing_start_tag,
            State.MARKUP_DECLARATION: self._markup_declaration,
            State.COMMENT: self._comment,
            State.BOGUS_COMMENT: self._bogus_comment,
            State.DOCTYPE: self._doctype,
        }

    def __iter__(self) -> Iterator[Token]:
        while self.pos < len(self.text):
            self._handlers[self.state]()
            if self._pending:
                yield from self._pending
                self._pending.clear()
        self._finish()
        yield from self._pending
        self._pending.clear()

    # --- emit helpers ---

    def _emit_text(self, data: str) -> None:
        if data:
            self._pending.append(Token(TokenKind.TEXT, data))

    def _start_tag(self, kind: TokenKind) -> None:
        self._tag = Token(kind)
        self.state = State.TAG_NAME

    def _start_attribute(self) -> None:
        self._attr_name = ""
        self._attr_value = ""
        self._attr_malformed = False

    def _commit_attribute(self) -> None:
        name = self._attr_name
        if self._tag is not None and name and not self._attr_malformed and name not in self._tag.attrs:
            self._tag.attrs[name] = self._attr_value
        self._start_attribute()

    def _emit_tag(self) -> None:
        tag = self._tag
        self._tag = None
        self.state = State.DATA
        if tag is None or not tag.data:
            return
        if tag.kind is TokenKind.END_TAG:
            tag.attrs = {}
            tag.self_closing = False
        self._pending.append(tag)
        if tag.kind is TokenKind.START_TAG and tag.data in RAW_TEXT_ELEMENTS:
            self._raw_end = re.compile(r"</%s(?=[\s/>]|$)" % re.escape(tag.data), re.IGNORECASE)
            self.state = State.RAW_TEXT

    def _finish(self) -> None:
        """Flush whatever construct was open when input ran out."""
        if self.state is State.TAG_OPEN:
            self._emit_text("<")
        elif self.state is State.END_TAG_OPEN:
            self._emit_text("</")
        elif self._tag is not None:
            if self.state in (State.ATTRIBUTE_NAME, State.AFTER_ATTRIBUTE_NAME, State.BEFORE_ATTRIBUTE_VALUE):
                self._commit_attribute()
            elif self.state is State.ATTRIBUTE_VALUE_UNQUOTED:
                self._commit_attribute()
            self._emit_tag()
        self.state = State.DATA

    # --- states ---

    def _data(self) -> None:
        end = self.text.find("<", self.pos)
        if end == -1:
            self._emit_text(self.text[self.pos :])
            self.pos = len(self.text)
            return
        self._emit_text(self.text[self.pos : end])
        self.pos = end + 1
        self.state = State.TAG_OPEN

    def _raw_text(self) -> None:
        assert self._raw_end is not None
        match = self._raw_end.search(self.text, self.pos)
        if match is None:
            self._emit_text(self.text[self.pos :])
            self.pos = len(self.text)
            return
        self._emit_text(self.text[self.pos : match.start()])
        self.pos = match.start() + 2
        self.state = State.END_TAG_OPEN

    def _tag_open(self) -> None:
        char = self.text[self.pos]
        if char.isascii() and char.isalpha():
            self._start_tag(TokenKind.START_TAG)
        elif char == "/":
            self.pos += 1
            self.state = State.END_TAG_OPEN
        elif char == "!":
            self.pos += 1
            self.state = State.MARKUP_DECLARATION
        elif char == "?":
            self.state = State.BOGUS_COMMENT
        else:
            self._emit_text("<")
            self.state = State.DATA

    def _end_tag_open(self) -> None:
        char = self.text[self.pos]
        if char.isascii() and char.isalpha():
            self._start_tag(TokenKind.END_TAG)
        elif char == ">":
            self.pos += 1
            self.state = State.DATA
        else:
            self.state = State.BOGUS_COMMENT

    def _tag_name(self) -> None:
        assert self._tag is not None
        match = _TAG_NAME_RE.match(self.text, self.pos)
        if match:
            self._tag.data += match.group().lower()
            self.pos = match.end()
            return
        char = self.text[self.pos]
        self.pos += 1
        if char == ">":
            self._emit_tag()
        elif char == "/":
            self.state = State.SELF_CLOSING_START_TAG
        else:
            self.state = State.BEFORE_ATTRIBUTE_NAME

    def _before_attribute_name(self) -> None:
        char = self.text[self.pos]
        if char in WHITESPACE:
            self.pos += 1
        elif char == "/":
            self.pos += 1
            self.state = State.SELF_CLOSING_START_TAG
        elif char == ">":
            self.pos += 1
            self._emit_tag()
        else:
            self._start_attribute()
            if char == "=":
                # An attribute cannot start with "="; keep scanning it so it can be dropped whole.
                self._attr_malformed = True
                self._attr_name = "="
                self.pos += 1
            self.state = State.ATTRIBUTE_NAME

    def _attribute_name(self) -> None:
        match = _ATTRIBUTE_NAME_RE.match(self.text, self.pos)
        if match:
            name = match.group()
            if _INVALID_NAME_CHARS.intersection(name):
                self._attr_malformed = True
            self._attr_name += name.lower()
            self.pos = match.end()
            return
        char = self.text[self.pos]
        self.pos += 1
        if char == "=":
            self.state = State.BEFORE_ATTRIBUTE_VALUE
        elif char == ">":
            self._commit_attribute()
            self._emit_tag()
        elif char == "/":
            self._commit_attribute()
            self.state = State.SELF_CLOSING_START_TAG
        else:
            self.state = State.AFTER_ATTRIBUTE_NAME

    def _after_attribute_name(self) -> None:
        char = self.text[self.pos]
        if char in WHITESPACE:
            self.pos += 1
        elif char == "=":
            self.pos += 1
            self.state = State.BEFORE_ATTRIBUTE_VALUE
        elif char == ">":
            self.pos += 1
            self._commit_attribute()
            self._emit_tag()
        elif char == "/":
            self.pos += 1
            self._commit_attribute()
            self.state = State.SELF_CLOSING_START_TAG
        else:
            self._commit_attribute()
            self.state = State.ATTRIBUTE_NAME

    def _before_attribute_value(self) -> None:
        char = self.text[self.pos]
        if char in WHITESPACE:
            self.pos += 1
        elif char == '"':
            self.pos += 1
            self.state = State.ATTRIBUTE_VALUE_DOUBLE_QUOTED
        elif char == "'":
            self.pos += 1
            self.state = State.ATTRIBUTE_VALUE_SINGLE_QUOTED
        elif char == ">":
            self.pos += 1
            self._commit_attribute()
            self._emit_tag()
        else:
            self.state = State.ATTRIBUTE_VALUE_UNQUOTED

    def _quoted_value(self, quote: str) -> None:
        end = self.text.find(quote, self.pos)
        if end == -1:
            # Unterminated value: drop the attribute, keep the element.
            self._start_attribute()
            self.pos = len(self.text)
            return
        self._attr_value = self.text[self.pos : end]
        self.pos = end + 1
        self._commit_attribute()
        self.state = State.BEFORE_ATTRIBUTE_NAME

    def _unquoted_value(self) -> None:
        match = _UNQUOTED_VALUE_RE.match(self.text, self.pos)
        if match:
            value = match.group()
            if _INVALID_UNQUOTED_CHARS.intersection(value):
                self._attr_malformed = True
            self._attr_value += value
            self.pos = match.end()
            return
        self._commit_attribute()
        self.state = State.BEFORE_ATTRIBUTE_NAME

    def _self_closing_start_tag(self) -> None:
        assert self._tag is not None
        if self.text[self.pos] == ">":
            self.pos += 1
            self._tag.self_closing = True
            self._emit_tag()
        else:
            self.state = State.BEFORE_ATTRIBUTE_NAME

    def _markup_declaration(self) -> None:
        text, pos = self.text, self.pos
        if text.startswith("--", pos):
            self.pos += 2
            self.state = State.COMMENT
        elif text[pos : pos + 7].lower() == "doctype":
            self.pos += 7
            self.state = State.DOCTYPE
        elif text.startswith("[CDATA[", pos):
            end = text.find("]]>", pos + 7)
            stop = len(text) if end == -1 else end
            self._emit_text(text[pos + 7 : stop])
            self.pos = len(text) if end == -1 else end + 3
            self.state = State.DATA
        else:
            self.state = State.BOGUS_COMMENT

    def _comment(self) -> None:
        text = self.text
        if text.startswith(">", self.pos):
            # "<!-->" is an empty comment.
            self.pos += 1
            self._pending.append(Token(TokenKind.COMMENT, ""))
            self.state = State.DATA
            return
        end = text.find("-->", self.pos)
        if end == -1:
            self._pending.append(Token(TokenKind.COMMENT, text[self.pos :]))
            self.pos = len(text)
        else:
            self._pending.append(Token(TokenKind.COMMENT, text[self.pos : end]))
            self.pos = end + 3
        self.state = State.DATA

    def _bogus_comment(self) -> None:
        end = self.text.find(">", self.pos)
        stop = len(self.text) if end == -1 else end
        self._pending.append(Token(TokenKind.COMMENT, self.text[self.pos : stop]))
        self.pos = stop + 1 if end != -1 else stop
        self.state = State.DATA

    def _doctype(self) -> None:
        end = self.text.find(">", self.pos)
        stop = len(self.text) if end == -1 else end
        self._pending.append(Token(TokenKind.DOCTYPE, self.text[self.pos : stop].strip()))
        self.pos = stop + 1 if end != -1 else stop
        self.state = State.DATA


def tokenize(text: str) -> Iterator[Token]:
    """Tokenize ``text``; see :class:`Tokenizer`."""
    return iter(Tokenizer(text))
