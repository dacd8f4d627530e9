"""
Arena-backed document tree.

Nodes reference each other by integer index into ``Document.nodes``; a node
never holds a reference to another node object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

TEXT = "#text"
COMMENT = "#comment"
DOCUMENT = "#document"


@dataclass(slots=True)
class Node:
    """A single element, text or comment node."""

    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List[int] = field(default_factory=list)
    parent: Optional[int] = None
    text: str = ""

    @property
    def is_element(self) -> bool:
        return not self.tag.startswith("#")

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT

    @property
    def class_and_id(self) -> str:
        """Lowercased ``class`` and ``id`` values joined by a space."""
        return f"{self.attrs.get('class', '')} {self.attrs.get('id', '')}".strip().lower()


@dataclass(slots=True)
class Document:
    """Node arena plus document-level facts gathered while parsing."""

    nodes: List[Node] = field(default_factory=lambda: [Node(DOCUMENT)])
    root: int = 0
    base_uri: Optional[str] = None
    encoding: Optional[str] = None
    doctype: Optional[str] = None

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    def add(self, node: Node, parent: int) -> int:
        """Append ``node`` to the arena as the last child of ``parent``."""
        index = len(self.nodes)
        node.parent = parent
        self.nodes.append(node)
        self.nodes[parent].children.append(index)
        return index

    def detach(self, index: int) -> None:
        """Unlink ``index`` from its parent. The node stays in the arena."""
        node = self.nodes[index]
        if node.parent is None:
            raise ValueError("cannot detach the document root")
        self.nodes[node.parent].children.remove(index)
        node.parent = None

    def iter_preorder(self, start: Optional[int] = None) -> Iterator[int]:
        """Yield indices of the subtree at ``start`` in document order."""
        stack = [self.root if start is None else start]
        while stack:
            index = stack.pop()
            yield index
            stack.extend(reversed(self.nodes[index].children))

    def iter_elements(self, tag: str, start: Optional[int] = None) -> Iterator[int]:
        for index in self.iter_preorder(start):
            if self.nodes[index].tag == tag:
                yield index

    def find_first(self, tag: str, start: Optional[int] = None) -> Optional[int]:
        return next(self.iter_elements(tag, start), None)

    def ancestors(self, index: int) -> List[int]:
        """Return ancestors of ``index`` ordered from its parent up to the root."""
        chain = []
        parent = self.nodes[index].parent
        while parent is not None:
            chain.append(parent)
            parent = self.nodes[parent].parent
        return chain

    def text_content(self, index: int) -> str:
        """Concatenate every text node in the subtree, in document order."""
        return "".join(self.nodes[i].text for i in self.iter_preorder(index) if self.nodes[i].is_text)

    def depth_first_order(self) -> Dict[int, int]:
        """Map each attached node to its position in a pre-order traversal."""
        return {index: position for position, index in enumerate(self.iter_preorder())}
