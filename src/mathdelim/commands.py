"""Editing commands on math spans.

    set_latex(host, selection)          selected text becomes a MathSpan
    set_latex(host, selection, "x^2")   selection replaced by MathSpan("x^2")
    unset_latex(host, path)             MathSpan becomes its latex as text
    update_math(host, path, latex=...)  attributes of an existing span change
    input_text(host, path, offset, t)   typed delimiters become a MathSpan

Commands return True when they changed the document (or found it already
in the requested state) and False for input they cannot act on: an empty
latex, a selection inside a verbatim region, a path that is not the
expected node. They never raise for such input.

"""

import dataclasses
import re
from dataclasses import dataclass

from mathdelim.builder import ReplacementPlan
from mathdelim.config import ScanConfig, resolve_config
from mathdelim.delimiters import PRIORITY
from mathdelim.errors import TreeContractError
from mathdelim.host import DocumentHost
from mathdelim.nodes import Inline, MathSpan, Node, Text
from mathdelim.scanner import clean_content
from mathdelim.tree import Path


@dataclass(frozen=True, slots=True)
class TextSelection:
    """Character range ``[start, end)`` inside the Text leaf at ``path``."""

    path: Path
    start: int
    end: int

    @property
    def empty(self) -> bool:
        return self.start == self.end


def parse_latex_input(
    source: str,
    display_mode: bool | None = None,
    *,
    config: ScanConfig | None = None,
) -> MathSpan | None:
    """Turn user input into a span, stripping one surrounding delimiter.

    A surrounding delimiter decides the display mode unless
    ``display_mode`` is given. Returns None for empty input.

        >>> parse_latex_input("$$x$$")
        MathSpan(latex='x', display_mode=True)

    """
    invisible = resolve_config(config).invisible_chars
    latex = clean_content(source, invisible)
    implied = False
    for kind in PRIORITY:
        match = kind.pattern.fullmatch(latex)
        if match is not None:
            latex = clean_content(match.group(1), invisible)
            implied = kind.display_mode
            break
    if not latex:
        return None
    return MathSpan(latex=latex, display_mode=implied if display_mode is None else display_mode)


def set_latex(
    host: DocumentHost,
    selection: TextSelection,
    latex: str | None = None,
    *,
    display_mode: bool | None = None,
    config: ScanConfig | None = None,
) -> bool:
    """Convert the selected text (or ``latex``, when given) into a MathSpan.

    The span replaces the selection; text before and after it keeps the
    leaf's marks.

    Returns:
        False for empty input, an invalid selection, or a selection inside
        a verbatim region.

    """
    config = resolve_config(config)
    leaf = _node_or_none(host, selection.path)
    if not isinstance(leaf, Text):
        return False
    if not 0 <= selection.start <= selection.end <= len(leaf.content):
        return False
    run = next((r for r in host.text_runs(config=config) if r.path == selection.path), None)
    if run is None or run.in_excluded_region:
        return False

    source = latex if latex is not None else leaf.content[selection.start : selection.end]
    span = parse_latex_input(source, display_mode, config=config)
    if span is None:
        return False

    nodes: list[Inline] = []
    if selection.start > 0:
        nodes.append(Text(leaf.content[: selection.start], leaf.marks))
    nodes.append(span)
    if selection.end < len(leaf.content):
        nodes.append(Text(leaf.content[selection.end :], leaf.marks))
    host.apply(ReplacementPlan.single(selection.path, nodes), meta={"command": "set_latex"})
    return True


def unset_latex(host: DocumentHost, path: Path) -> bool:
    """Replace the MathSpan at ``path`` with its latex as plain text.

    The text is not escaped, so a later hydration pass may turn it back
    into math if it still carries delimiters.

    """
    span = _node_or_none(host, path)
    if not isinstance(span, MathSpan):
        return False
    host.apply(ReplacementPlan.single(path, (Text(span.latex),)), meta={"command": "unset_latex"})
    return True


def update_math(
    host: DocumentHost,
    path: Path,
    *,
    latex: str | None = None,
    display_mode: bool | None = None,
    config: ScanConfig | None = None,
) -> bool:
    """Change the latex and/or display mode of the MathSpan at ``path``.

    Returns:
        False when ``path`` is not a MathSpan, nothing is given, or the
        new latex is empty. True without a mutation when the span already
        has the requested attributes.

    """
    span = _node_or_none(host, path)
    if not isinstance(span, MathSpan) or (latex is None and display_mode is None):
        return False
    changes: dict[str, object] = {}
    if latex is not None:
        cleaned = clean_content(latex, resolve_config(config).invisible_chars)
        if not cleaned:
            return False
        changes["latex"] = cleaned
    if display_mode is not None:
        changes["display_mode"] = display_mode
    updated = dataclasses.replace(span, **changes)  # type: ignore[arg-type]
    if updated == span:
        return True
    host.apply(ReplacementPlan.single(path, (updated,)), meta={"command": "update_math"})
    return True


# Rules checked against the text before the cursor, in order. Each match
# must end at the cursor, so only the keystroke that closes it fires.
_TYPED_DISPLAY = re.compile(r"\$\$((?:(?!\$\$)[\s\S])*?)\$\$\Z")
_TYPED_INLINE = re.compile(r"(?<![\\$])\$((?:\\[^\n]|[^$\n\\])+)\$\Z")
_TYPED_DISPLAY_PLACEHOLDER = re.compile(r"(?:\A|(?<=\n))[ \t]*\$\$[ \t]\Z")


def input_text(
    host: DocumentHost,
    path: Path,
    offset: int,
    text: str,
    *,
    config: ScanConfig | None = None,
) -> bool:
    """Insert typed ``text`` into the Text leaf at ``path`` and apply input rules.

    When the typed text completes a delimiter pair right before the cursor,
    the pair becomes a MathSpan in the same step:

        typed "$$x^2$$"  -> MathSpan("x^2", display_mode=True)
        typed "$x^2$"    -> MathSpan("x^2")
        typed "$$ " at the start of a line -> empty display MathSpan

    Only the leaf being typed into is examined. Inside a verbatim region,
    or when the pair is empty, the text is inserted unchanged.

    Returns:
        True when an input rule created a MathSpan. False when the text
        was inserted as is, or when ``path``/``offset`` do not address a
        position in a Text leaf (nothing is inserted then).

    """
    config = resolve_config(config)
    leaf = _node_or_none(host, path)
    if not isinstance(leaf, Text) or not text or not 0 <= offset <= len(leaf.content):
        return False
    content = leaf.content[:offset] + text + leaf.content[offset:]
    cursor = offset + len(text)
    before, after = content[:cursor], content[cursor:]

    run = next((r for r in host.text_runs(config=config) if r.path == path), None)
    span, start = None, cursor
    if run is not None and not run.in_excluded_region:
        span, start = _match_input_rule(before, config)

    if span is None:
        host.apply(ReplacementPlan.single(path, (Text(content, leaf.marks),)), meta={"command": "input_text"})
        return False
    nodes: list[Inline] = []
    if start > 0:
        nodes.append(Text(before[:start], leaf.marks))
    nodes.append(span)
    if after:
        nodes.append(Text(after, leaf.marks))
    host.apply(ReplacementPlan.single(path, nodes), meta={"command": "input_text"})
    return True


def _match_input_rule(before: str, config: ScanConfig) -> tuple[MathSpan | None, int]:
    """Span produced by the first rule matching at the end of ``before``."""
    for pattern in (_TYPED_DISPLAY, _TYPED_INLINE):
        match = pattern.search(before)
        if match is not None:
            span = parse_latex_input(match.group(0), config=config)
            if span is not None:
                return span, match.start()
    match = _TYPED_DISPLAY_PLACEHOLDER.search(before)
    if match is not None:
        return MathSpan(latex="", display_mode=True), match.start()
    return None, len(before)


def _node_or_none(host: DocumentHost, path: Path) -> Node | None:
    if not path:
        return None
    try:
        return host.node_at(path)
    except TreeContractError:
        return None


__all__ = [
    "TextSelection",
    "input_text",
    "parse_latex_input",
    "set_latex",
    "unset_latex",
    "update_math",
]
