"""Verbatim region detection for plain text.

Stored text can hold code that must never be scanned for math: fenced code
blocks and inline code spans. This module splits text into alternating
prose and verbatim regions so text-level operations (``normalize_text``,
``load_document``) can leave code byte-for-byte untouched.

Fences follow CommonMark: up to three spaces of indent, three or more
backticks or tildes, closed by a fence of the same character that is at
least as long. An unterminated fence runs to the end of the text.

Inline code: a run of N backticks closed by a run of exactly N backticks.

"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

FENCE_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>[^\n]*)$")

INLINE_CODE_PATTERN = re.compile(r"(?<!`)(`+)(?!`)([\s\S]+?)(?<!`)\1(?!`)")


@dataclass(frozen=True, slots=True)
class Region:
    """A slice of text that is either prose or verbatim code."""

    text: str
    verbatim: bool


def is_closing_fence(line: str, fence: str) -> bool:
    """Whether ``line`` closes a block opened with ``fence``."""
    stripped = line.strip()
    return (
        len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
        and len(line) - len(line.lstrip(" ")) <= 3
    )


def split_fenced(text: str) -> Iterator[Region]:
    """Split text into prose and fenced-code regions.

    Fence lines belong to the verbatim region. Concatenating the region
    texts reproduces ``text`` exactly.

    """
    lines = text.splitlines(keepends=True)
    prose: list[str] = []
    i = 0
    while i < len(lines):
        match = FENCE_PATTERN.match(lines[i].rstrip("\r\n"))
        fence = match.group("fence") if match else None
        # Backtick fences may not carry backticks in their info string
        if fence is None or (fence[0] == "`" and "`" in match.group("info")):  # type: ignore[union-attr]
            prose.append(lines[i])
            i += 1
            continue
        if prose:
            yield Region("".join(prose), verbatim=False)
            prose = []
        code = [lines[i]]
        i += 1
        while i < len(lines):
            code.append(lines[i])
            i += 1
            if is_closing_fence(code[-1].rstrip("\r\n"), fence):
                break
        yield Region("".join(code), verbatim=True)
    if prose:
        yield Region("".join(prose), verbatim=False)


def split_inline_code(text: str) -> Iterator[Region]:
    """Split prose into plain and inline-code regions (backticks included)."""
    pos = 0
    for match in INLINE_CODE_PATTERN.finditer(text):
        if match.start() > pos:
            yield Region(text[pos : match.start()], verbatim=False)
        yield Region(match.group(0), verbatim=True)
        pos = match.end()
    if pos < len(text):
        yield Region(text[pos:], verbatim=False)


def iter_regions(text: str) -> Iterator[Region]:
    """Split text into prose and verbatim regions (fences, then inline code)."""
    for region in split_fenced(text):
        if region.verbatim:
            yield region
        else:
            yield from split_inline_code(region.text)


__all__ = [
    "FENCE_PATTERN",
    "INLINE_CODE_PATTERN",
    "Region",
    "is_closing_fence",
    "iter_regions",
    "split_fenced",
    "split_inline_code",
]
