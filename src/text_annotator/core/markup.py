"""Markup tree nodes - the retained-mode rendering of a block of text."""

import html
import uuid
from typing import Iterable, Iterator, List, Optional, Union

from .annotation import AnnotationKind


class TextNode:
    """A run of plain text."""

    def __init__(self, text: str):
        self.text = text
        self.parent: Optional["Container"] = None

    def __repr__(self) -> str:
        return f"TextNode({self.text!r})"


class Container:
    """A node that owns an ordered list of children."""

    def __init__(self, children: Optional[Iterable["Node"]] = None):
        self.children: List[Node] = []
        self.parent: Optional[Container] = None
        for child in children or ():
            self.append(child)

    @property
    def text(self) -> str:
        return "".join(child.text for child in self.children)

    def __len__(self) -> int:
        return len(self.text)

    def append(self, node: "Node") -> None:
        node.parent = self
        self.children.append(node)

    def index_of(self, node: "Node") -> int:
        """Index of ``node`` among the children, compared by identity."""
        for index, child in enumerate(self.children):
            if child is node:
                return index
        raise ValueError(f"{node!r} is not a child of {self!r}")

    def replace_child(self, node: "Node", replacements: List["Node"]) -> None:
        index = self.index_of(node)
        for replacement in replacements:
            replacement.parent = self
        self.children[index:index + 1] = replacements
        node.parent = None

    def normalize(self) -> None:
        """Merge adjacent text nodes and drop empty ones."""
        merged: List[Node] = []
        for child in self.children:
            if isinstance(child, TextNode):
                if not child.text:
                    child.parent = None
                    continue
                if merged and isinstance(merged[-1], TextNode):
                    merged[-1].text += child.text
                    child.parent = None
                    continue
            merged.append(child)
        self.children = merged

    def iter_elements(self) -> Iterator["MarkElement"]:
        """Yield every descendant MarkElement, outermost first."""
        for child in self.children:
            if isinstance(child, MarkElement):
                yield child
                yield from child.iter_elements()

    def attached_root(self) -> "Container":
        node = self
        while node.parent is not None:
            node = node.parent
        return node


class MarkElement(Container):
    """Markup wrapping an annotated span. Holds only the annotation's id."""

    def __init__(
        self,
        annotation_id: str,
        kind: AnnotationKind,
        children: Optional[Iterable["Node"]] = None,
    ):
        super().__init__(children)
        self.annotation_id = annotation_id
        self.kind = kind
        self.pending_deletion = False

    @property
    def has_nested_annotations(self) -> bool:
        return any(True for _ in self.iter_elements())

    def __repr__(self) -> str:
        return f"MarkElement({self.annotation_id!r}, {self.kind.value}, {self.text!r})"


class Block(Container):
    """A paragraph of host content with a stable id."""

    def __init__(self, text: str = "", block_id: Optional[str] = None):
        super().__init__()
        self.block_id = block_id or uuid.uuid4().hex
        if text:
            self.append(TextNode(text))

    def to_html(self) -> str:
        """Render the block as HTML, annotations as data-attributed spans."""
        return f'<p data-block-id="{self.block_id}">{_children_html(self.children)}</p>'

    def __repr__(self) -> str:
        return f"Block({self.block_id!r}, {self.text!r})"


Node = Union[TextNode, MarkElement]


def _children_html(children: List[Node]) -> str:
    parts = []
    for child in children:
        if isinstance(child, TextNode):
            parts.append(html.escape(child.text))
            continue
        classes = f"annotation-{child.kind.value}"
        if child.pending_deletion:
            classes += " annotation-pending-deletion"
        parts.append(
            f'<span class="{classes}" data-annotation-id="{child.annotation_id}" '
            f'data-annotation-kind="{child.kind.value}">'
            f"{_children_html(child.children)}</span>"
        )
    return "".join(parts)
