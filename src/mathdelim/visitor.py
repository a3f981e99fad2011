"""Tree Visitor and Transformer for mathdelim.

Provides a base visitor class with match-based dispatch and an immutable
transform function for rewriting frozen trees.

Example: collect all display equations:

    class DisplayCollector(BaseVisitor[None]):
        def __init__(self) -> None:
            self.found: list[MathSpan] = []

        def visit_math_span(self, node: MathSpan) -> None:
            if node.display_mode:
                self.found.append(node)

    collector = DisplayCollector()
    collector.visit(doc)

Example: force every equation inline:

    def inline_all(node: Node) -> Node:
        if isinstance(node, MathSpan):
            return dataclasses.replace(node, display_mode=False)
        return node

    new_doc = transform(doc, inline_all)

Thread Safety:
    Visitors are NOT shared across threads by default (they may accumulate
    mutable state). Create a new visitor per thread. The transform function
    is pure and safe to call from any thread.

"""

import dataclasses
from collections.abc import Callable
from typing import Generic, TypeVar

from mathdelim.nodes import (
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    MathSpan,
    Node,
    Paragraph,
    Text,
)


T = TypeVar("T")


class BaseVisitor(Generic[T]):
    """Base tree visitor with match-based dispatch.

    Subclass and override ``visit_*`` methods for node types you care about.
    Unhandled node types fall through to ``visit_default``. Children are
    walked automatically after the ``visit_*`` call.

    Type parameter ``T`` is the return type of visit methods (use ``None``
    for side-effect-only visitors).

    """

    def visit(self, node: Node) -> T:
        """Dispatch to the appropriate ``visit_*`` method.

        Walks children automatically after the visit method returns.

        """
        result = self._dispatch(node)
        self._walk_children(node)
        return result

    def visit_default(self, node: Node) -> T:
        """Called for node types without a specific ``visit_*`` method.

        Override this for catch-all behavior. Default returns None
        (suitable for ``BaseVisitor[None]``).

        """
        return None  # type: ignore[return-value]

    # -- Block visitors --------------------------------------------------------

    def visit_document(self, node: Document) -> T:
        return self.visit_default(node)

    def visit_paragraph(self, node: Paragraph) -> T:
        return self.visit_default(node)

    def visit_heading(self, node: Heading) -> T:
        return self.visit_default(node)

    def visit_block_quote(self, node: BlockQuote) -> T:
        return self.visit_default(node)

    def visit_code_block(self, node: CodeBlock) -> T:
        return self.visit_default(node)

    # -- Inline visitors -------------------------------------------------------

    def visit_text(self, node: Text) -> T:
        return self.visit_default(node)

    def visit_math_span(self, node: MathSpan) -> T:
        return self.visit_default(node)

    # -- Internal dispatch -----------------------------------------------------

    def _dispatch(self, node: Node) -> T:
        """Match-based dispatch to visit_* methods."""
        match node:
            case Document():
                return self.visit_document(node)
            case Paragraph():
                return self.visit_paragraph(node)
            case Heading():
                return self.visit_heading(node)
            case BlockQuote():
                return self.visit_block_quote(node)
            case CodeBlock():
                return self.visit_code_block(node)
            case Text():
                return self.visit_text(node)
            case MathSpan():
                return self.visit_math_span(node)
            case _:
                return self.visit_default(node)

    def _walk_children(self, node: Node) -> None:
        """Recursively visit child nodes."""
        for child in children_of(node):
            self.visit(child)


def children_of(node: Node) -> tuple[Node, ...]:
    """Return the child nodes of a container, or ``()`` for leaves."""
    match node:
        case Document(children=children) | BlockQuote(children=children):
            return children
        case Paragraph(children=children) | Heading(children=children):
            return children
        case CodeBlock(children=children):
            return children
        case _:
            return ()


def transform(doc: Document, fn: Callable[[Node], Node | None]) -> Document:
    """Apply a function to every node in the tree, returning a new tree.

    The function ``fn`` is called bottom-up: children are transformed first,
    then the parent is transformed with its new children. This ensures ``fn``
    always receives nodes with already-transformed children.

    Return ``None`` from ``fn`` to remove a node from the tree. The root
    Document cannot be removed; returning None for it raises TypeError.

    Since all nodes are frozen dataclasses, this produces a new immutable tree.
    The original tree is untouched.

    Args:
        doc: The document to transform.
        fn: Function that receives a node and returns a (possibly new) node,
            or None to remove the node from the tree.

    Returns:
        A new Document with the transformation applied.

    """
    result = _transform_node(doc, fn)
    if result is None or not isinstance(result, Document):
        msg = "transform fn must return a Document for the root (cannot remove root)"
        raise TypeError(msg)
    return result


def _transform_node(node: Node, fn: Callable[[Node], Node | None]) -> Node | None:
    """Transform a single node bottom-up: children first, then self."""
    transformed = _transform_children(node, fn)
    return fn(transformed)


def _transform_children(node: Node, fn: Callable[[Node], Node | None]) -> Node:
    """Produce a new node with children transformed; filter out None (removed) nodes."""
    children = children_of(node)
    if not children:
        return node
    new_children = tuple(
        result for c in children
        if (result := _transform_node(c, fn)) is not None
    )
    if new_children != children:
        return dataclasses.replace(node, children=new_children)  # type: ignore[call-arg]
    return node
