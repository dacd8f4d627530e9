"""
Tag-soup HTML parser.

Lexes arbitrary, often malformed markup with a state-machine tokenizer and
builds an arena-backed ``Document`` using an explicit implicit-closing
table. Only undecodable bytes fail; malformed markup is always recovered.
"""

from .builder import TreeBuilder, parse_document
from .decoding import decode_document, sniff_declared_encoding
from .rules import IMPLICIT_CLOSE, VOID_ELEMENTS, ImplicitClose
from .tokenizer import Token, TokenKind, Tokenizer, tokenize
from .tree import COMMENT, DOCUMENT, TEXT, Document, Node

__all__ = [
    "COMMENT",
    "DOCUMENT",
    "TEXT",
    "Document",
    "IMPLICIT_CLOSE",
    "ImplicitClose",
    "Node",
    "Token",
    "TokenKind",
    "Tokenizer",
    "TreeBuilder",
    "VOID_ELEMENTS",
    "decode_document",
    "parse_document",
    "sniff_declared_encoding",
    "tokenize",
]
