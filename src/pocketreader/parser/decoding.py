"""
Byte-to-text decoding for fetched documents.
"""

from __future__ import annotations

import codecs
import re
from typing import List, Optional, Tuple, Union

import charset_normalizer
import structlog

from ..errors import ParseError

logger = structlog.get_logger(__name__)

_BOMS: Tuple[Tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)

# <meta charset="x"> and <meta http-equiv="Content-Type" content="text/html; charset=x">
_META_CHARSET = r"""<meta[^>]+?charset\s*=\s*["']?\s*([A-Za-z0-9_\-:.]+)"""
_META_CHARSET_BYTES_RE = re.compile(_META_CHARSET.encode("ascii"), re.IGNORECASE)
_META_CHARSET_TEXT_RE = re.compile(_META_CHARSET, re.IGNORECASE)
_SNIFF_LENGTH = 4096


def _canonical(name: str) -> Optional[str]:
    try:
        return codecs.lookup(name).name
    except LookupError:
        return None


def sniff_declared_encoding(markup: Union[str, bytes]) -> Optional[str]:
    """Return the charset declared by a ``<meta>`` tag near the top of ``markup``."""
    if isinstance(markup, str):
        match = _META_CHARSET_TEXT_RE.search(markup, 0, _SNIFF_LENGTH)
        declared = match.group(1) if match else None
    else:
        match_bytes = _META_CHARSET_BYTES_RE.search(markup[:_SNIFF_LENGTH])
        declared = match_bytes.group(1).decode("ascii") if match_bytes else None
    return _canonical(declared) if declared else None


def decode_document(markup: Union[str, bytes], encoding: Optional[str] = None) -> Tuple[str, Optional[str]]:
    """Decode ``markup`` to text and report the encoding used.

    Strings pass through unchanged. Bytes are decoded with, in order: the
    caller's ``encoding``, a byte-order mark, a ``<meta>`` charset
    declaration, then charset-normalizer detection.

    Raises:
        ParseError: if no candidate encoding decodes the bytes.
    """
    if isinstance(markup, str):
        return markup.lstrip("\ufeff"), _canonical(encoding) if encoding else sniff_declared_encoding(markup)
    if not isinstance(markup, (bytes, bytearray, memoryview)):
        raise TypeError(f"Expected str or bytes, got {type(markup).__name__}")

    data = bytes(markup)
    if not data:
        return "", _canonical(encoding) if encoding else "utf-8"

    candidates: List[str] = []
    if encoding:
        candidates.append(encoding)
    for bom, name in _BOMS:
        if data.startswith(bom):
            candidates.append(name)
            break
    declared = sniff_declared_encoding(data)
    if declared:
        candidates.append(declared)

    for name in candidates:
        try:
            return data.decode(name), _canonical(name)
        except (LookupError, UnicodeDecodeError) as e:
            logger.debug("Candidate encoding rejected", encoding=name, error=str(e))

    best = charset_normalizer.from_bytes(data).best()
    if best is None:
        raise ParseError("Document bytes could not be decoded as text", encoding=candidates[0] if candidates else None)
    logger.debug("Detected document encoding", encoding=best.encoding)
    return str(best), _canonical(best.encoding)
