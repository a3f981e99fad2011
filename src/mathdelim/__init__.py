"""
mathdelim: LaTeX delimiter recognition for rich-text documents

Finds math written with ``$..$``, ``$$..$$``, ``\\(..\\)`` or ``\\[..\\]``
inside document text, turns it into structured MathSpan nodes when a
document is loaded or content is pasted, and writes it back in a single
canonical form (``$..$`` inline, ``$$..$$`` display). Code is never
touched. Zero runtime dependencies.

Quick Start:
    >>> from mathdelim import scan, normalize_text
    >>> scan("Energy: $E=mc^2$")
    (PlainText(text='Energy: ', start=0, end=8), MathSegment(...))

    >>> normalize_text(r"Area \\(\\pi r^2\\)")
    'Area $\\\\pi r^2$'

Editing session:
    >>> from mathdelim import open_document, dump_document
    >>> host, controller = open_document("Energy: $E=mc^2$")
    >>> dump_document(host.document)
    'Energy: $E=mc^2$'

Installation:
    pip install mathdelim              # Core (zero deps)
    pip install mathdelim[test]        # + pytest and hypothesis
"""

from mathdelim.builder import ReplacementPlan, Scope, hydrate, plan_hydration
from mathdelim.commands import TextSelection, input_text, set_latex, unset_latex, update_math
from mathdelim.config import (
    ScanConfig,
    get_scan_config,
    reset_scan_config,
    scan_config_context,
    set_scan_config,
)
from mathdelim.delimiters import DelimiterKind
from mathdelim.errors import HydrationError, MathDelimError, TreeContractError
from mathdelim.host import DocumentHost, Mutation, TreeHost
from mathdelim.hydration import HydrationController, HydrationResult, HydrationState
from mathdelim.nodes import (
    Block,
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    Inline,
    MathSpan,
    Node,
    Paragraph,
    Text,
)
from mathdelim.resolver import MathSegment, PlainText, Segment, resolve
from mathdelim.scanner import Candidate, scan_candidates
from mathdelim.serialization import from_dict, from_json, to_dict, to_json
from mathdelim.serializer import normalize_text, serialize
from mathdelim.text import collect_math, extract_text
from mathdelim.textdoc import dump_document, load_document
from mathdelim.tree import TextRun, merge_adjacent_text
from mathdelim.visitor import BaseVisitor, transform

__version__ = "0.1.0"


def scan(text: str, *, config: ScanConfig | None = None) -> tuple[Segment, ...]:
    """Split text into plain and math segments.

    Args:
        text: Text of one run (no verbatim handling is applied)
        config: Scan configuration (context config if None)

    Returns:
        Ordered segments covering the whole text; empty for empty text

    Example:
        >>> [type(s).__name__ for s in scan(r"a \\[x\\] b")]
        ['PlainText', 'MathSegment', 'PlainText']
    """
    return resolve(text, scan_candidates(text, config=config))


def open_document(
    text: str,
    *,
    config: ScanConfig | None = None,
) -> tuple[TreeHost, HydrationController]:
    """Load stored text into a host and hydrate it.

    The returned controller is attached, so later pastes into the host
    hydrate automatically.

    Args:
        text: Stored document text
        config: Scan configuration (context config if None)

    Returns:
        The host and its attached controller, after the load pass
    """
    host = TreeHost(load_document(text))
    controller = HydrationController(host, config=config).attach()
    controller.load()
    return host, controller


__all__ = [  # noqa: RUF022 - grouped by category for maintainability
    # Version
    "__version__",
    # Core API
    "scan",
    "serialize",
    "normalize_text",
    "open_document",
    "hydrate",
    # Text document container
    "load_document",
    "dump_document",
    # Scanning
    "Candidate",
    "DelimiterKind",
    "MathSegment",
    "PlainText",
    "Segment",
    "resolve",
    "scan_candidates",
    # Block nodes
    "Block",
    "BlockQuote",
    "CodeBlock",
    "Document",
    "Heading",
    "Paragraph",
    # Inline nodes
    "Inline",
    "MathSpan",
    "Node",
    "Text",
    # Hydration
    "DocumentHost",
    "HydrationController",
    "HydrationResult",
    "HydrationState",
    "Mutation",
    "ReplacementPlan",
    "Scope",
    "TextRun",
    "TreeHost",
    "plan_hydration",
    # Commands
    "TextSelection",
    "input_text",
    "set_latex",
    "unset_latex",
    "update_math",
    # Visitor + Transform
    "BaseVisitor",
    "transform",
    "collect_math",
    "extract_text",
    "merge_adjacent_text",
    # Serialization
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    # Configuration (ContextVar-based)
    "ScanConfig",
    "get_scan_config",
    "set_scan_config",
    "reset_scan_config",
    "scan_config_context",
    # Errors
    "MathDelimError",
    "TreeContractError",
    "HydrationError",
]
