"""Delimiter kinds recognized by the scanner.

Four syntaxes mark LaTeX inside text. Two are canonical (``$...$`` and
``$$...$$``) and two are accepted on input only (``\\(...\\)`` and
``\\[...\\]``):

    kind            open  close  spans lines  display mode
    BLOCK_BRACKET   \\[    \\]     yes          True
    BLOCK_DOLLAR    $$    $$     yes          True
    INLINE_PAREN    \\(    \\)     yes          False
    INLINE_DOLLAR   $     $      no           False

Member order is resolution priority (highest first). Block forms may carry
a lone ``$`` in their body, so they are resolved before the inline forms.

Thread Safety:
    Compiled patterns are immutable; ``finditer`` builds a fresh iterator
    per call, so no cursor state is shared between scans.

"""

import re
from enum import Enum


class DelimiterKind(Enum):
    """One of the four delimiter syntaxes.

    The value is the stable name used in configuration dictionaries.

    """

    BLOCK_BRACKET = "block_bracket"
    BLOCK_DOLLAR = "block_dollar"
    INLINE_PAREN = "inline_paren"
    INLINE_DOLLAR = "inline_dollar"

    @property
    def open(self) -> str:
        return _DELIMITERS[self][0]

    @property
    def close(self) -> str:
        return _DELIMITERS[self][1]

    @property
    def spans_lines(self) -> bool:
        """Whether matched content may contain a newline."""
        return self is not DelimiterKind.INLINE_DOLLAR

    @property
    def display_mode(self) -> bool:
        """Display mode implied by this kind."""
        return self in BLOCK_KINDS

    @property
    def priority(self) -> int:
        """Resolution rank, 0 is highest."""
        return PRIORITY.index(self)

    @property
    def pattern(self) -> re.Pattern[str]:
        """Compiled pattern; group 1 is the raw content."""
        return _PATTERNS[self]

    @classmethod
    def coerce(cls, value: "DelimiterKind | str") -> "DelimiterKind":
        """Accept a member, its value, or its name (case-insensitive).

        Raises:
            ValueError: If the value names no delimiter kind.

        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for kind in cls:
            if key in (kind.value, kind.name.lower()):
                return kind
        available = ", ".join(kind.value for kind in cls)
        msg = f"Unknown delimiter kind: {value!r}. Available: {available}"
        raise ValueError(msg)


_DELIMITERS: dict[DelimiterKind, tuple[str, str]] = {
    DelimiterKind.BLOCK_BRACKET: ("\\[", "\\]"),
    DelimiterKind.BLOCK_DOLLAR: ("$$", "$$"),
    DelimiterKind.INLINE_PAREN: ("\\(", "\\)"),
    DelimiterKind.INLINE_DOLLAR: ("$", "$"),
}

# Non-greedy content up to the nearest closer. Inline dollar content never
# holds a newline or a bare ``$``, but may hold escaped characters (``\$``).
# An inline dollar never opens on an escaped ``\$`` or on either ``$`` of a
# ``$$`` pair.
_PATTERNS: dict[DelimiterKind, re.Pattern[str]] = {
    DelimiterKind.BLOCK_BRACKET: re.compile(r"\\\[([\s\S]*?)\\\]"),
    DelimiterKind.BLOCK_DOLLAR: re.compile(r"\$\$([\s\S]*?)\$\$"),
    DelimiterKind.INLINE_PAREN: re.compile(r"\\\(([\s\S]*?)\\\)"),
    DelimiterKind.INLINE_DOLLAR: re.compile(r"(?<![\\$])\$((?:\\[^\n]|[^$\n\\])+?)\$"),
}

PRIORITY: tuple[DelimiterKind, ...] = (
    DelimiterKind.BLOCK_BRACKET,
    DelimiterKind.BLOCK_DOLLAR,
    DelimiterKind.INLINE_PAREN,
    DelimiterKind.INLINE_DOLLAR,
)

BLOCK_KINDS: frozenset[DelimiterKind] = frozenset(
    (DelimiterKind.BLOCK_BRACKET, DelimiterKind.BLOCK_DOLLAR)
)


__all__ = [
    "BLOCK_KINDS",
    "PRIORITY",
    "DelimiterKind",
]
