"""
Markdown lesson parsing.

A lesson document is YAML frontmatter followed by slide sections whose
headers look like ``## [type] Title``. Each slide body is decomposed into
text, bullet, code and table elements. Code fences and tables are lifted out
first and replaced by placeholder tokens so their contents are never read as
bullets or prose.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

import yaml

from md2pptx.errors import MalformedFrontmatterError

# ── Patterns ──────────────────────────────────────────────────────────────────
_FRONTMATTER_OPEN_RE = re.compile(r"\A---[ \t]*\n")
_FRONTMATTER_CLOSE_RE = re.compile(r"^---[ \t]*$\n?", re.MULTILINE)
_SLIDE_HEADER_RE = re.compile(r"^## ", re.MULTILINE)
_TYPE_TAG_RE = re.compile(r"^\[(\w+)\]\s*(.*)$")

_BULLET_RE = re.compile(r"^(\s*)[-*•]\s+(.*\S)")
_BULLET_LINE_RE = re.compile(r"^\s*[-*•]\s+\S")
_CODE_FENCE_RE = re.compile(r"```(\w*)\r?\n(.*?)```", re.DOTALL)
_SEPARATOR_RE = re.compile(r"^\|(?:\s*:?-+:?\s*\|)+$")
_INLINE_RE = re.compile(r"\*\*(.+?)\*\*|`(.+?)`")

# NUL never survives into the working text, so tokens cannot collide
_SENTINEL = "\x00"


# ── Data model ────────────────────────────────────────────────────────────────


class SlideType(str, Enum):
    TITLE = "title"
    BULLET = "bullet"
    PLAN = "plan"
    DIVIDER = "divider"
    CONTENT = "content"
    IMAGE = "image"
    CODE = "code"
    QUOTE = "quote"
    CHART = "chart"

    @classmethod
    def from_tag(cls, tag: str) -> "SlideType":
        """Map a header tag to a slide type; unknown tags become ``content``."""
        try:
            return cls(tag.lower())
        except ValueError:
            return cls.CONTENT


@dataclass(frozen=True)
class SlideRecord:
    type: SlideType
    title: str
    raw_body: str


@dataclass(frozen=True)
class Bullet:
    text: str
    level: int = 0


@dataclass(frozen=True)
class CodeBlock:
    language: str
    code: str


@dataclass(frozen=True)
class TableRow:
    cells: tuple[str, ...]
    is_header: bool = False


@dataclass(frozen=True)
class InlineSpan:
    text: str
    bold: bool = False
    code: bool = False


@dataclass(frozen=True)
class TextElement:
    text: str
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class BulletsElement:
    bullets: tuple[Bullet, ...]
    kind: str = field(default="bullets", init=False)


@dataclass(frozen=True)
class CodeElement:
    block: CodeBlock
    kind: str = field(default="code", init=False)


@dataclass(frozen=True)
class TableElement:
    rows: tuple[TableRow, ...]
    kind: str = field(default="table", init=False)

    @property
    def column_count(self) -> int:
        return max((len(row.cells) for row in self.rows), default=0)


ContentElement = Union[TextElement, BulletsElement, CodeElement, TableElement]


# ── Frontmatter & slide splitting ─────────────────────────────────────────────


def parse_frontmatter(text: str) -> tuple[Mapping[str, Any], str]:
    """Split ``text`` into a read-only frontmatter mapping and the body.

    Raises MalformedFrontmatterError when the document does not open with a
    ``---`` delimited block or the block is not a YAML mapping.
    """
    text = text.lstrip("\ufeff").replace("\r\n", "\n")
    opening = _FRONTMATTER_OPEN_RE.match(text)
    if opening is None:
        raise MalformedFrontmatterError(
            "Document must start with a '---' delimited frontmatter block."
        )
    closing = _FRONTMATTER_CLOSE_RE.search(text, opening.end())
    if closing is None:
        raise MalformedFrontmatterError("Frontmatter block is not terminated by '---'.")

    raw_block = text[opening.end() : closing.start()]
    try:
        data = yaml.safe_load(raw_block)
    except yaml.YAMLError as exc:
        raise MalformedFrontmatterError(f"Unable to parse frontmatter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedFrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}."
        )
    metadata = {str(key): value for key, value in data.items()}
    return MappingProxyType(metadata), text[closing.end() :]


def split_slides(body: str) -> list[SlideRecord]:
    """Split a document body into slide records, in document order.

    Text before the first ``## `` header is not part of any slide.
    """
    slides: list[SlideRecord] = []
    sections = _SLIDE_HEADER_RE.split(body.replace("\r\n", "\n"))
    for section in sections[1:]:
        if not section.strip():
            continue
        lines = section.strip().split("\n")
        header = lines[0].strip()
        raw_body = "\n".join(lines[1:]).strip()

        slide_type = SlideType.CONTENT
        title = header
        tag_match = _TYPE_TAG_RE.match(header)
        if tag_match:
            slide_type = SlideType.from_tag(tag_match.group(1))
            title = tag_match.group(2).strip()

        slides.append(SlideRecord(type=slide_type, title=title, raw_body=raw_body))
    return slides


def parse_markdown(text: str) -> tuple[Mapping[str, Any], list[SlideRecord]]:
    """Parse a whole lesson document into frontmatter and slide records."""
    frontmatter, body = parse_frontmatter(text)
    return frontmatter, split_slides(body)


# ── Extractors ────────────────────────────────────────────────────────────────


def parse_bullets(content: str) -> list[Bullet]:
    """Extract bullet lines; every two characters of indent is one level."""
    bullets: list[Bullet] = []
    for line in content.split("\n"):
        match = _BULLET_RE.match(line)
        if match:
            bullets.append(Bullet(text=match.group(2), level=len(match.group(1)) // 2))
    return bullets


def parse_code_blocks(content: str) -> list[CodeBlock]:
    """Extract fenced code blocks; unterminated fences are ignored."""
    return [
        CodeBlock(language=match.group(1) or "text", code=match.group(2).strip())
        for match in _CODE_FENCE_RE.finditer(content)
    ]


def _is_pipe_row(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def _split_cells(line: str) -> tuple[str, ...]:
    return tuple(cell.strip() for cell in line.strip().split("|")[1:-1])


def _build_table(lines: list[str]) -> list[TableRow]:
    """Turn a run of pipe rows into table rows.

    Separator rows are dropped. Rows before the first separator are headers;
    without a separator no row is a header.
    """
    separators = {i for i, line in enumerate(lines) if _SEPARATOR_RE.match(line.strip())}
    first_separator = min(separators) if separators else -1
    return [
        TableRow(cells=_split_cells(line), is_header=i < first_separator)
        for i, line in enumerate(lines)
        if i not in separators
    ]


def _table_runs(lines: list[str]) -> list[tuple[int, int, list[TableRow]]]:
    """Find ``(start, end, rows)`` for every run of two or more pipe rows."""
    runs: list[tuple[int, int, list[TableRow]]] = []
    i = 0
    while i < len(lines):
        if not _is_pipe_row(lines[i]):
            i += 1
            continue
        j = i
        while j < len(lines) and _is_pipe_row(lines[j]):
            j += 1
        if j - i >= 2:
            rows = _build_table(lines[i:j])
            if rows:
                runs.append((i, j, rows))
        i = j
    return runs


def parse_tables(content: str) -> list[list[TableRow]]:
    """Extract every pipe-delimited table from ``content``."""
    return [rows for _, _, rows in _table_runs(content.split("\n"))]


# ── Content elements ──────────────────────────────────────────────────────────


def parse_content_elements(content: str) -> list[ContentElement]:
    """Decompose a slide body into ordered text/bullets/code/table elements."""
    opaque: dict[str, ContentElement] = {}

    def _token(kind: str) -> str:
        return f"{_SENTINEL}{kind}:{len(opaque)}{_SENTINEL}"

    def _stash_code(match: re.Match) -> str:
        token = _token("CODE")
        opaque[token] = CodeElement(
            CodeBlock(language=match.group(1) or "text", code=match.group(2).strip())
        )
        return f"\n{token}\n"

    # Pass 1: lift code fences, then tables, out of the text
    working = _CODE_FENCE_RE.sub(_stash_code, content.replace(_SENTINEL, ""))
    lines = working.split("\n")

    remaining: list[str] = []
    cursor = 0
    for start, end, rows in _table_runs(lines):
        remaining.extend(lines[cursor:start])
        token = _token("TABLE")
        opaque[token] = TableElement(tuple(rows))
        remaining.append(token)
        cursor = end
    remaining.extend(lines[cursor:])

    # Pass 2: classify what is left line by line
    elements: list[ContentElement] = []
    text_lines: list[str] = []
    bullet_lines: list[str] = []

    def flush_text():
        if text_lines:
            elements.append(TextElement("\n".join(text_lines).strip()))
            text_lines.clear()

    def flush_bullets():
        if bullet_lines:
            bullets = parse_bullets("\n".join(bullet_lines))
            if bullets:
                elements.append(BulletsElement(tuple(bullets)))
            bullet_lines.clear()

    for line in remaining:
        stripped = line.strip()
        if stripped in opaque:
            flush_text()
            flush_bullets()
            elements.append(opaque[stripped])
        elif _BULLET_LINE_RE.match(line):
            flush_text()
            bullet_lines.append(line)
        elif stripped:
            flush_bullets()
            text_lines.append(line)
        else:
            flush_text()
            flush_bullets()

    flush_text()
    flush_bullets()
    return elements


# ── Inline formatting ─────────────────────────────────────────────────────────


def format_inline(text: str) -> list[InlineSpan]:
    """Split a line into plain, ``**bold**`` and `` `code` `` spans."""
    spans: list[InlineSpan] = []
    pos = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > pos:
            spans.append(InlineSpan(text[pos : match.start()]))
        if match.group(1) is not None:
            spans.append(InlineSpan(match.group(1), bold=True))
        else:
            spans.append(InlineSpan(match.group(2), code=True))
        pos = match.end()
    if pos < len(text) or not spans:
        spans.append(InlineSpan(text[pos:]))
    return spans
