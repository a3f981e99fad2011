"""Legacy structured math forms.

Older documents stored math as markup or JSON nodes instead of canonical
delimiter text:

    <span data-type="math" data-latex="E=mc^2" data-display-mode="false"></span>
    <eq><span data-type="math" data-latex="x"></span></eq>
    <eqn><span data-type="math" data-latex="\\sum_i i" data-display-mode="true"></span></eqn>
    {"type": "math", "attrs": {"latex": "E=mc^2", "displayMode": false}}

These forms are accepted on input and converted into ``MathSpan`` values,
which then serialize through ``mathdelim.serializer.serialize`` like any
other span. They are never produced.

Attribute fallbacks: ``latex`` when ``data-latex`` is absent, and
``displayMode="true"`` when ``data-display-mode`` is absent.

"""

import html
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from mathdelim.config import ScanConfig, resolve_config
from mathdelim.nodes import MathSpan
from mathdelim.scanner import clean_content
from mathdelim.utils.logger import get_logger

logger = get_logger(__name__)

LEGACY_MARKUP_PATTERN = re.compile(
    r"(?:<(?P<wrap>eqn|eq)\b[^>]*>\s*)?"
    r"<span\b(?P<attrs>[^>]*\bdata-type\s*=\s*[\"']math[\"'][^>]*)>"
    r"(?P<body>[\s\S]*?)</span>"
    r"(?(wrap)\s*</(?P=wrap)>)",
    re.IGNORECASE,
)

_ATTR_PATTERN = re.compile(r"([\w:.-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")


@dataclass(frozen=True, slots=True)
class LegacyMatch:
    """One legacy markup element and the span it carries."""

    start: int
    end: int
    span: MathSpan


def parse_attributes(raw: str) -> dict[str, str]:
    """Parse quoted HTML attributes; names are lower-cased, values unescaped."""
    attrs: dict[str, str] = {}
    for match in _ATTR_PATTERN.finditer(raw):
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attrs[match.group(1).lower()] = html.unescape(value)
    return attrs


def span_from_attrs(
    attrs: Mapping[str, str],
    *,
    config: ScanConfig | None = None,
) -> MathSpan | None:
    """Build a MathSpan from legacy markup attributes.

    Returns:
        The span, or None when no latex is present.

    """
    config = resolve_config(config)
    latex = clean_content(attrs.get("data-latex") or attrs.get("latex") or "", config.invisible_chars)
    if not latex:
        return None
    display_mode = attrs.get("data-display-mode") == "true" or attrs.get("displaymode") == "true"
    return MathSpan(latex=latex, display_mode=display_mode)


def span_from_legacy_node(
    data: Mapping[str, Any],
    *,
    config: ScanConfig | None = None,
) -> MathSpan | None:
    """Build a MathSpan from a legacy JSON node ``{"type": "math", "attrs": {...}}``.

    Returns:
        The span, or None when the node is not a math node or has no latex.

    """
    if data.get("type") != "math":
        return None
    attrs = data.get("attrs") or {}
    raw = attrs.get("latex")
    if not isinstance(raw, str):
        return None
    latex = clean_content(raw, resolve_config(config).invisible_chars)
    if not latex:
        return None
    display_mode = attrs.get("displayMode")
    return MathSpan(latex=latex, display_mode=display_mode is True or display_mode == "true")


def find_legacy_markup(text: str, *, config: ScanConfig | None = None) -> list[LegacyMatch]:
    """Find legacy math markup elements carrying latex.

    Elements without latex are skipped and stay in the text unchanged.

    """
    matches: list[LegacyMatch] = []
    for match in LEGACY_MARKUP_PATTERN.finditer(text):
        span = span_from_attrs(parse_attributes(match.group("attrs")), config=config)
        if span is None:
            logger.warning("Skipping legacy math markup without latex at offset %d", match.start())
            continue
        matches.append(LegacyMatch(match.start(), match.end(), span))
    return matches


def normalize_legacy_markup(text: str, *, config: ScanConfig | None = None) -> str:
    """Replace legacy math markup with canonical delimiter text."""
    from mathdelim.serializer import serialize

    if "data-type" not in text.lower():
        return text
    matches = find_legacy_markup(text, config=config)
    if not matches:
        return text
    logger.debug("Normalizing %d legacy math element(s)", len(matches))
    parts: list[str] = []
    pos = 0
    for match in matches:
        parts.append(text[pos : match.start])
        parts.append(serialize(match.span))
        pos = match.end
    parts.append(text[pos:])
    return "".join(parts)


__all__ = [
    "LEGACY_MARKUP_PATTERN",
    "LegacyMatch",
    "find_legacy_markup",
    "normalize_legacy_markup",
    "parse_attributes",
    "span_from_attrs",
    "span_from_legacy_node",
]
