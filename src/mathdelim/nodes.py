"""Typed document tree nodes for mathdelim.

All nodes are frozen dataclasses with slots for:
- Immutability: a hydration pass reads a snapshot that cannot change under it
- Memory efficiency: __slots__ reduces memory footprint
- Pattern matching: Python 3.10+ match statements work naturally

Node Hierarchy:
Node (base)
├── Block (block-level elements)
│   ├── Document
│   ├── Paragraph
│   ├── Heading
│   ├── BlockQuote
│   └── CodeBlock
└── Inline (inline elements)
    ├── Text
    └── MathSpan

A node's position is its *path*: the tuple of child indices leading to it
from the Document, e.g. ``(0, 2)`` is the third inline of the first block.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all tree nodes."""


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Text leaf with optional formatting marks.

    Marks are plain names ("bold", "italic", "code", ...). A mark listed in
    ``ScanConfig.verbatim_marks`` (inline code by default) makes the leaf a
    verbatim region.

    """

    content: str
    marks: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class MathSpan(Node):
    """One recognized equation.

    Canonical text: $E = mc^2$ (inline) or $$E = mc^2$$ (display)

    ``latex`` never contains the delimiters it was recognized with. It is
    empty only for the display placeholder created by typing ``$$ `` at the
    start of a line.
    Rendering is left to an external renderer consuming
    ``(latex, display_mode)``.

    """

    latex: str
    display_mode: bool = False


# PEP 695 type alias for inline elements
Inline: TypeAlias = Text | MathSpan


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Paragraph(Node):
    """Paragraph block."""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Heading(Node):
    """ATX heading.

    Text form: # Heading

    """

    level: Literal[1, 2, 3, 4, 5, 6]
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class CodeBlock(Node):
    """Fenced code block.

    Text form:
        ```python
        price = "$5"
        ```

    Content is verbatim: it is never scanned for math.

    """

    children: tuple[Text, ...]
    language: str | None = None

    @property
    def code(self) -> str:
        return "".join(child.content for child in self.children)


@dataclass(frozen=True, slots=True)
class BlockQuote(Node):
    """Block quote.

    Text form: > quoted text

    """

    children: tuple[Block, ...]


@dataclass(frozen=True, slots=True)
class Document(Node):
    """Root document node.

    Contains all top-level blocks in the document.

    """

    children: tuple[Block, ...]


# PEP 695 type alias for block elements
Block: TypeAlias = Paragraph | Heading | CodeBlock | BlockQuote
