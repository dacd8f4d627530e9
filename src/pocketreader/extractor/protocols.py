"""
Protocols for the reader's collaborators.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class SourceItem(Protocol):
    """A saved item handed over by the item-management layer.

    The item's ``uri`` is used as the base URI and its ``title`` (when the
    layer knows one) as the explicit title hint.
    """

    uri: Optional[str]
    title: Optional[str]


@runtime_checkable
class CancelSignal(Protocol):
    """Anything that can report cancellation, e.g. ``threading.Event``."""

    def is_set(self) -> bool:
        ...
