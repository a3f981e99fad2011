"""Span resolver: candidate arbitration and segment assembly.

Candidates are considered in kind priority order (block bracket, block
dollar, inline paren, inline dollar), then by offset. A candidate is
accepted only if its range does not intersect an already accepted range.
Rejected candidates are discarded; they are not retried at another offset.

The accepted set is turned into a gap-free, ordered segment sequence:

    "Formula: $E=mc^2$"
    -> PlainText("Formula: ", 0, 9), MathSegment(MathSpan("E=mc^2"), 9, 17)

Invariants:
- Segments cover ``[0, len(text))`` exactly once, left to right.
- ``PlainText.text == text[start:end]``.
- Math segments appear in source order.

Thread Safety:
    ``resolve`` is pure and safe to call from any thread.

"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeAlias

from mathdelim.delimiters import DelimiterKind
from mathdelim.nodes import MathSpan
from mathdelim.scanner import Candidate


@dataclass(frozen=True, slots=True)
class PlainText:
    """Unmatched text, copied from the run unchanged."""

    text: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class MathSegment:
    """Recognized math with the range (delimiters included) it came from."""

    span: MathSpan
    start: int
    end: int
    kind: DelimiterKind


# PEP 695 type alias for resolved segments
Segment: TypeAlias = PlainText | MathSegment


def accept_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Apply the priority/occupancy rule.

    Returns:
        Accepted candidates sorted by start offset.

    """
    ordered = sorted(candidates, key=lambda c: (c.kind.priority, c.start))
    accepted: list[Candidate] = []
    for candidate in ordered:
        if any(candidate.overlaps(a.start, a.end) for a in accepted):
            continue
        accepted.append(candidate)
    accepted.sort(key=lambda c: c.start)
    return accepted


def resolve(text: str, candidates: Iterable[Candidate]) -> tuple[Segment, ...]:
    """Resolve overlapping candidates into the final segment sequence.

    Args:
        text: The scanned text
        candidates: Candidates for ``text`` (any kinds, any order)

    Returns:
        Ordered segments covering the whole text. Empty text gives an
        empty tuple; text without accepted candidates gives one PlainText.

    """
    segments: list[Segment] = []
    pos = 0
    for candidate in accept_candidates(candidates):
        if candidate.start > pos:
            segments.append(PlainText(text[pos : candidate.start], pos, candidate.start))
        span = MathSpan(latex=candidate.raw_latex, display_mode=candidate.kind.display_mode)
        segments.append(MathSegment(span, candidate.start, candidate.end, candidate.kind))
        pos = candidate.end
    if pos < len(text):
        segments.append(PlainText(text[pos:], pos, len(text)))
    return tuple(segments)


def math_spans(segments: Iterable[Segment]) -> list[MathSpan]:
    """Extract the MathSpans from a segment sequence, in order."""
    return [seg.span for seg in segments if isinstance(seg, MathSegment)]


__all__ = [
    "MathSegment",
    "PlainText",
    "Segment",
    "accept_candidates",
    "math_spans",
    "resolve",
]
