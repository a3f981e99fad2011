"""Delimiter scanner: raw text to candidate math matches.

Each delimiter kind is matched independently with leftmost, non-overlapping
regex semantics. Candidates of different kinds may overlap each other; the
resolver (``mathdelim.resolver``) arbitrates.

Content handling per match:
1. Invisible characters (object replacement, zero width space) are removed.
2. Surrounding whitespace is trimmed.
3. Empty content produces no candidate.

An opener without a closer produces no candidate; the text stays plain.

Example:
    >>> from mathdelim.scanner import scan_candidates
    >>> [(c.kind.value, c.raw_latex) for c in scan_candidates("a $x$ b")]
    [('inline_dollar', 'x')]

Thread Safety:
    All functions are pure. Each call iterates with a fresh ``finditer``.

"""

from dataclasses import dataclass

from mathdelim.config import ScanConfig, resolve_config
from mathdelim.delimiters import DelimiterKind


@dataclass(frozen=True, slots=True)
class Candidate:
    """Tentative match of one delimiter kind.

    ``start``/``end`` are offsets into the scanned text and include the
    delimiters; ``raw_latex`` is the cleaned, trimmed content.

    """

    start: int
    end: int
    kind: DelimiterKind
    raw_latex: str

    def overlaps(self, start: int, end: int) -> bool:
        """Whether ``[self.start, self.end)`` intersects ``[start, end)``."""
        return self.start < end and start < self.end


def clean_content(content: str, invisible_chars: str) -> str:
    """Remove invisible characters, then trim whitespace."""
    if invisible_chars:
        content = content.translate({ord(ch): None for ch in invisible_chars})
    return content.strip()


def find_candidates(
    text: str,
    kind: DelimiterKind,
    *,
    config: ScanConfig | None = None,
) -> list[Candidate]:
    """Find all candidates of a single delimiter kind.

    Args:
        text: Text of one run
        kind: Delimiter kind to match
        config: Scan configuration (context config if None)

    Returns:
        Candidates in order of appearance. Matches whose content is empty
        after cleaning are dropped.

    """
    invisible = resolve_config(config).invisible_chars
    candidates: list[Candidate] = []
    for match in kind.pattern.finditer(text):
        latex = clean_content(match.group(1), invisible)
        if not latex:
            continue
        candidates.append(Candidate(match.start(), match.end(), kind, latex))
    return candidates


def scan_candidates(text: str, *, config: ScanConfig | None = None) -> list[Candidate]:
    """Find candidates for every enabled delimiter kind.

    Returns:
        Candidates grouped by kind in priority order, each group in order
        of appearance.

    """
    config = resolve_config(config)
    if not text:
        return []
    candidates: list[Candidate] = []
    for kind in config.kinds:
        # Cheap pre-check: no opener, no match
        if kind.open not in text:
            continue
        candidates.extend(find_candidates(text, kind, config=config))
    return candidates


__all__ = [
    "Candidate",
    "clean_content",
    "find_candidates",
    "scan_candidates",
]
