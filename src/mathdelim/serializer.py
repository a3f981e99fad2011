"""Canonical serializer: MathSpan back to delimiter text.

    MathSpan("a^2+b^2")                    -> $a^2+b^2$
    MathSpan("\\sum_i i", display_mode=True) -> $$\\sum_i i$$

Latex is written verbatim, without escaping, except that line breaks in
inline latex (from a multi-line ``\\(..\\)``) are folded into single
spaces: the inline form cannot carry a newline. The scanner re-extracts
the same latex from this exact form, so for every span whose latex obeys
the wire format (inline: no newline, no bare ``$``; display: no ``$$``):

    scan(serialize(span)) == (MathSegment(span, ...),)

Exceptions: inline latex containing ``\\(..\\)`` and display latex
containing ``\\[..\\]``. Those inner pairs outrank the canonical dollars
when the text is scanned again.

Input-only forms (``\\(..\\)``, ``\\[..\\]``, legacy markup) are never
produced; they normalize to the canonical form on first save.

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import re
from collections.abc import Iterable

from mathdelim.config import ScanConfig, resolve_config
from mathdelim.legacy import normalize_legacy_markup
from mathdelim.nodes import MathSpan
from mathdelim.regions import iter_regions
from mathdelim.resolver import MathSegment, PlainText, Segment, resolve
from mathdelim.scanner import scan_candidates

_LINE_BREAK = re.compile(r"[ \t]*\r?\n[ \t]*")


def serialize(span: MathSpan) -> str:
    """Emit the canonical delimiter form of a span."""
    if span.display_mode:
        return f"$${span.latex}$$"
    latex = _LINE_BREAK.sub(" ", span.latex)
    return f"${latex}$"


def serialize_segments(segments: Iterable[Segment]) -> str:
    """Emit plain text verbatim and math in canonical form."""
    parts: list[str] = []
    for segment in segments:
        match segment:
            case PlainText(text=text):
                parts.append(text)
            case MathSegment(span=span):
                parts.append(serialize(span))
    return "".join(parts)


def normalize_text(text: str, *, config: ScanConfig | None = None) -> str:
    """Canonicalize every recognized math span in stored text.

    Prose regions are scanned and re-emitted with canonical delimiters
    (legacy markup first converted when enabled). Fenced code blocks and
    inline code spans are copied unchanged. Idempotent:
    ``normalize_text(normalize_text(t)) == normalize_text(t)``.

    Example:
        >>> normalize_text(r"Area \\(\\pi r^2\\) and `$x$`")
        'Area $\\\\pi r^2$ and `$x$`'

    """
    config = resolve_config(config)
    parts: list[str] = []
    for region in iter_regions(text):
        if region.verbatim:
            parts.append(region.text)
            continue
        prose = region.text
        if config.legacy_markup:
            prose = normalize_legacy_markup(prose, config=config)
        parts.append(serialize_segments(resolve(prose, scan_candidates(prose, config=config))))
    return "".join(parts)


__all__ = [
    "normalize_text",
    "serialize",
    "serialize_segments",
]
