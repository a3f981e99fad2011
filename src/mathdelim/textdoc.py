"""Plain-text document container.

Stored documents are plain text with a small block grammar:

    # Heading                      -> Heading(level=1)
    > quoted text                  -> BlockQuote (recursive)
    ```lang ... ```                -> CodeBlock (also ~~~)
    anything else                  -> Paragraph
    `code`                         -> Text with the "code" mark

Blocks are separated by blank lines, except inside an open ``$$`` or
``\\[`` block that begins a line and whose closer appears further down
(before the next code fence): multi-line display math may hold blank
lines.

Loading does not hydrate: math stays delimiter text inside Text leaves
until a hydration pass runs. Dumping writes MathSpans in canonical form,
so ``dump_document(hydrate(load_document(text)))`` is the canonical text.

Marks other than "code" have no plain-text form and are dropped on dump,
as are empty display placeholders; use ``mathdelim.serialization`` for
full fidelity.

"""

import re

from mathdelim.delimiters import BLOCK_KINDS, PRIORITY
from mathdelim.nodes import Block, BlockQuote, CodeBlock, Document, Heading, Inline, MathSpan, Paragraph, Text
from mathdelim.regions import FENCE_PATTERN, is_closing_fence, split_inline_code
from mathdelim.serializer import serialize

CODE_MARK = "code"

_HEADING_PATTERN = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_QUOTE_PATTERN = re.compile(r"^ {0,3}> ?(.*)$")
_BACKTICK_RUN = re.compile(r"`+")

_BLOCK_ORDER = tuple(kind for kind in PRIORITY if kind in BLOCK_KINDS)


def load_document(text: str) -> Document:
    """Parse stored text into a Document (without hydration)."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return Document(children=tuple(_parse_blocks(lines)))


def dump_document(doc: Document) -> str:
    """Write a Document as stored text; math uses canonical delimiters."""
    return "\n\n".join(_dump_block(block) for block in doc.children)


# =============================================================================
# Loading
# =============================================================================


def _parse_blocks(lines: list[str]) -> list[Block]:
    blocks: list[Block] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(Paragraph(children=parse_inlines("\n".join(paragraph))))
            paragraph.clear()

    i = 0
    while i < len(lines):
        line = lines[i]
        fence = _opening_fence(line)
        if fence is not None:
            flush()
            i, block = _read_code_block(lines, i, fence)
            blocks.append(block)
            continue
        if paragraph and _continues_block_math(paragraph, lines, i):
            paragraph.append(line)
            i += 1
            continue
        if not line.strip():
            flush()
            i += 1
            continue
        heading = _HEADING_PATTERN.match(line)
        if heading:
            flush()
            level = len(heading.group(1))
            blocks.append(Heading(level=level, children=parse_inlines(heading.group(2) or "")))  # type: ignore[arg-type]
            i += 1
            continue
        if _QUOTE_PATTERN.match(line):
            flush()
            quoted: list[str] = []
            while i < len(lines) and (match := _QUOTE_PATTERN.match(lines[i])):
                quoted.append(match.group(1))
                i += 1
            blocks.append(BlockQuote(children=tuple(_parse_blocks(quoted))))
            continue
        paragraph.append(line)
        i += 1
    flush()
    return blocks


def _opening_fence(line: str) -> tuple[str, str] | None:
    match = FENCE_PATTERN.match(line)
    if match is None:
        return None
    fence, info = match.group("fence"), match.group("info")
    # Backtick fences may not carry backticks in their info string
    if fence[0] == "`" and "`" in info:
        return None
    return fence, info.strip()


def _read_code_block(lines: list[str], start: int, fence: tuple[str, str]) -> tuple[int, CodeBlock]:
    marker, info = fence
    body: list[str] = []
    i = start + 1
    while i < len(lines):
        if is_closing_fence(lines[i], marker):
            i += 1
            break
        body.append(lines[i])
        i += 1
    code = "\n".join(body)
    children = (Text(code),) if code else ()
    return i, CodeBlock(children=children, language=info or None)


def _open_block_closer(text: str) -> str | None:
    """Closer of the first block math opener left unclosed in ``text``.

    Only an opener that begins a line (after indentation) counts; a stray
    ``$$`` inside prose never holds a paragraph open.

    """
    for kind in _BLOCK_ORDER:
        text = kind.pattern.sub("_", text)
    openers = [(text.find(kind.open), kind.close) for kind in _BLOCK_ORDER if kind.open in text]
    if not openers:
        return None
    position, closer = min(openers, key=lambda item: item[0])
    line_start = text.rfind("\n", 0, position) + 1
    if text[line_start:position].strip():
        return None
    return closer


def _continues_block_math(paragraph: list[str], lines: list[str], i: int) -> bool:
    closer = _open_block_closer("\n".join(paragraph))
    if closer is None:
        return False
    for line in lines[i:]:
        if _opening_fence(line) is not None:
            return False
        if closer in line:
            return True
    return False


def parse_inlines(text: str) -> tuple[Inline, ...]:
    """Split paragraph text into plain Text and code-marked Text leaves."""
    nodes: list[Inline] = []
    for region in split_inline_code(text):
        if region.verbatim:
            nodes.append(Text(_strip_code_span(region.text), frozenset({CODE_MARK})))
        else:
            nodes.append(Text(region.text))
    return tuple(nodes)


def _strip_code_span(raw: str) -> str:
    ticks = len(raw) - len(raw.lstrip("`"))
    inner = raw[ticks:-ticks]
    if len(inner) >= 2 and inner[0] == " " and inner[-1] == " " and inner.strip(" "):
        inner = inner[1:-1]
    return inner


# =============================================================================
# Dumping
# =============================================================================


def _dump_block(block: Block) -> str:
    match block:
        case Paragraph(children=children):
            return dump_inlines(children)
        case Heading(level=level, children=children):
            content = dump_inlines(children)
            return f"{'#' * level} {content}" if content else "#" * level
        case CodeBlock(language=language):
            code = block.code
            fence = "`" * max(3, _longest_backtick_run(code) + 1)
            info = language or ""
            if not code:
                return f"{fence}{info}\n{fence}"
            return f"{fence}{info}\n{code}\n{fence}"
        case BlockQuote(children=children):
            inner = "\n\n".join(_dump_block(child) for child in children)
            return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
        case _:
            msg = f"Cannot dump {type(block).__name__} as a block"
            raise TypeError(msg)


def dump_inlines(children: tuple[Inline, ...]) -> str:
    """Write inline nodes as text: code spans in backticks, math canonical."""
    parts: list[str] = []
    for child in children:
        match child:
            case MathSpan(latex=""):
                continue
            case MathSpan():
                parts.append(serialize(child))
            case Text(content=content, marks=marks) if CODE_MARK in marks:
                parts.append(_code_span(content))
            case Text(content=content):
                parts.append(content)
    return "".join(parts)


def _code_span(content: str) -> str:
    ticks = "`" * (_longest_backtick_run(content) + 1)
    pad = ""
    if content.startswith("`") or content.endswith("`"):
        pad = " "
    elif len(content) >= 2 and content[0] == " " and content[-1] == " " and content.strip(" "):
        pad = " "
    return f"{ticks}{pad}{content}{pad}{ticks}"


def _longest_backtick_run(text: str) -> int:
    return max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)


__all__ = [
    "CODE_MARK",
    "dump_document",
    "dump_inlines",
    "load_document",
    "parse_inlines",
]
