"""Extract plain text and equations from mathdelim trees.

Example:
    >>> from mathdelim import extract_text, hydrate, load_document
    >>> doc = hydrate(load_document("Energy: $E=mc^2$"))
    >>> extract_text(doc)
    'Energy: E=mc^2'
"""

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
from mathdelim.visitor import BaseVisitor


def extract_text(node: Node) -> str:
    """Extract plain text from any node.

    Math contributes its latex without delimiters. Blocks are joined with
    a space.

    Args:
        node: Any tree node (block or inline).

    Returns:
        Concatenated plain text from the node and its descendants.

    """
    match node:
        case Text():
            return node.content
        case MathSpan():
            return node.latex
        case CodeBlock():
            return node.code
        case Paragraph() | Heading():
            return "".join(extract_text(c) for c in node.children)
        case BlockQuote() | Document():
            return " ".join(extract_text(c) for c in node.children)
        case _:
            return ""


class _MathCollector(BaseVisitor[None]):
    def __init__(self) -> None:
        self.found: list[MathSpan] = []

    def visit_math_span(self, node: MathSpan) -> None:
        self.found.append(node)


def collect_math(node: Node) -> list[MathSpan]:
    """Return every MathSpan under ``node`` in document order."""
    collector = _MathCollector()
    collector.visit(node)
    return collector.found


__all__ = ["collect_math", "extract_text"]
