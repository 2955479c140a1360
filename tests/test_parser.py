import pytest

from md2pptx.errors import MalformedFrontmatterError
from md2pptx.parser import (
    Bullet,
    BulletsElement,
    CodeElement,
    InlineSpan,
    SlideType,
    TableElement,
    TextElement,
    format_inline,
    parse_bullets,
    parse_code_blocks,
    parse_content_elements,
    parse_frontmatter,
    parse_markdown,
    parse_tables,
    split_slides,
)

DOCUMENT = """---
discipline: Programming
type: lecture
module: 2
lesson: "2.3: Collections"
---

# Collections

## [plan] Lesson plan
- Lists
- Dictionaries

## [divider] Section 1

## [Content] Lists
- one

## Untyped header
Some prose.

## [unknown] Mystery
text
"""


# ── Frontmatter ──────────────────────────────────────────────────────────────


def test_parse_markdown_returns_frontmatter_and_slides() -> None:
    frontmatter, slides = parse_markdown(DOCUMENT)
    assert frontmatter["discipline"] == "Programming"
    assert frontmatter["module"] == 2
    assert frontmatter["lesson"] == "2.3: Collections"
    assert len(slides) == 5


def test_frontmatter_is_read_only() -> None:
    frontmatter, _ = parse_frontmatter("---\ntitle: x\n---\nbody")
    with pytest.raises(TypeError):
        frontmatter["title"] = "y"  # type: ignore[index]


def test_empty_frontmatter_block() -> None:
    frontmatter, body = parse_frontmatter("---\n---\n## [content] A\n")
    assert dict(frontmatter) == {}
    assert body.startswith("## [content] A")


@pytest.mark.parametrize(
    "text",
    [
        "## [content] No frontmatter\n- a\n",
        "---\ntitle: never closed\n## [content] A\n",
        "---\ntitle: [unbalanced\n---\n",
        "---\n- just\n- a list\n---\n",
    ],
)
def test_malformed_frontmatter_raises(text: str) -> None:
    with pytest.raises(MalformedFrontmatterError):
        parse_frontmatter(text)


def test_crlf_document_is_accepted() -> None:
    frontmatter, slides = parse_markdown("---\r\ntitle: x\r\n---\r\n## [content] A\r\n- a\r\n")
    assert frontmatter["title"] == "x"
    assert slides[0].raw_body == "- a"


# ── Slide splitting ──────────────────────────────────────────────────────────


def test_split_slides_keeps_header_order_and_types() -> None:
    _, slides = parse_markdown(DOCUMENT)
    assert [s.type for s in slides] == [
        SlideType.PLAN,
        SlideType.DIVIDER,
        SlideType.CONTENT,
        SlideType.CONTENT,
        SlideType.CONTENT,
    ]
    assert [s.title for s in slides] == [
        "Lesson plan",
        "Section 1",
        "Lists",
        "Untyped header",
        "Mystery",
    ]


def test_split_slides_bodies() -> None:
    _, slides = parse_markdown(DOCUMENT)
    assert slides[0].raw_body == "- Lists\n- Dictionaries"
    assert slides[1].raw_body == ""
    assert slides[3].raw_body == "Some prose."


def test_preamble_before_first_header_is_not_a_slide() -> None:
    slides = split_slides("# Document title\nIntro text\n\n## [content] Only\nbody")
    assert len(slides) == 1
    assert slides[0].title == "Only"


def test_zero_headers_yield_no_slides() -> None:
    assert split_slides("") == []
    assert split_slides("just some text\n### not a slide\n") == []


def test_type_tags_are_case_insensitive() -> None:
    assert SlideType.from_tag("DIVIDER") is SlideType.DIVIDER
    assert SlideType.from_tag("Quote") is SlideType.QUOTE
    assert SlideType.from_tag("sparkline") is SlideType.CONTENT


# ── Extractors ───────────────────────────────────────────────────────────────


def test_bullet_levels_from_indentation() -> None:
    bullets = parse_bullets("- a\n  - b\n    - c\n   * d\n• e\nnot a bullet")
    assert bullets == [
        Bullet("a", 0),
        Bullet("b", 1),
        Bullet("c", 2),
        Bullet("d", 1),
        Bullet("e", 0),
    ]


def test_dash_without_text_is_not_a_bullet() -> None:
    assert parse_bullets("-   \n---\n-a") == []


def test_parse_code_blocks() -> None:
    blocks = parse_code_blocks("```python\nprint(1)\n\n```\ntext\n```\nraw\n```")
    assert [(b.language, b.code) for b in blocks] == [("python", "print(1)"), ("text", "raw")]


def test_parse_tables_marks_rows_before_separator_as_headers() -> None:
    tables = parse_tables("| A | B |\n| :-- | --: |\n| 1 | 2 |\n| 3 | 4 |")
    assert len(tables) == 1
    rows = tables[0]
    assert [r.cells for r in rows] == [("A", "B"), ("1", "2"), ("3", "4")]
    assert [r.is_header for r in rows] == [True, False, False]


def test_table_without_separator_has_no_header() -> None:
    rows = parse_tables("| a | b |\n| c | d |")[0]
    assert [r.is_header for r in rows] == [False, False]


def test_multiple_rows_before_separator_are_headers() -> None:
    rows = parse_tables("| Group | |\n| A | B |\n|---|---|\n| 1 | 2 |")[0]
    assert [r.is_header for r in rows] == [True, True, False]


def test_single_pipe_line_is_not_a_table() -> None:
    assert parse_tables("| lonely |\nafter") == []


# ── Content elements ─────────────────────────────────────────────────────────


def test_mixed_body_preserves_source_order() -> None:
    body = (
        "Intro line\n"
        "- first\n"
        "  - nested\n"
        "\n"
        "```python\n"
        "x = 1\n"
        "```\n"
        "| h1 | h2 |\n"
        "|----|----|\n"
        "| v1 | v2 |\n"
        "Closing words"
    )
    elements = parse_content_elements(body)
    assert [e.kind for e in elements] == ["text", "bullets", "code", "table", "text"]
    assert elements[0] == TextElement("Intro line")
    assert elements[1] == BulletsElement((Bullet("first", 0), Bullet("nested", 1)))
    assert elements[2].block.language == "python"
    assert elements[2].block.code == "x = 1"
    assert elements[3].rows[0].is_header
    assert elements[4] == TextElement("Closing words")


def test_text_then_bullets_switches_accumulator() -> None:
    elements = parse_content_elements("line one\nline two\n- a\n- b\nback to text")
    assert elements == [
        TextElement("line one\nline two"),
        BulletsElement((Bullet("a"), Bullet("b"))),
        TextElement("back to text"),
    ]


def test_blank_lines_split_bullet_blocks() -> None:
    elements = parse_content_elements("- a\n\n- b")
    assert elements == [BulletsElement((Bullet("a"),)), BulletsElement((Bullet("b"),))]


def test_code_content_is_not_read_as_bullets_or_tables() -> None:
    body = "```\n- not a bullet\n| not | table |\n| still | code |\n```"
    elements = parse_content_elements(body)
    assert len(elements) == 1
    assert isinstance(elements[0], CodeElement)
    assert elements[0].block.code == "- not a bullet\n| not | table |\n| still | code |"


def test_two_code_blocks_in_order() -> None:
    body = "```js\nfirst()\n```\nbetween\n```\n  second()  \n```"
    elements = parse_content_elements(body)
    codes = [e for e in elements if isinstance(e, CodeElement)]
    assert [(c.block.language, c.block.code) for c in codes] == [
        ("js", "first()"),
        ("text", "second()"),
    ]
    assert [e.kind for e in elements] == ["code", "text", "code"]


def test_unterminated_fence_degrades_to_text() -> None:
    elements = parse_content_elements("```python\nprint('hi')\n")
    assert elements == [TextElement("```python\nprint('hi')")]


def test_table_inside_bullet_block_wins() -> None:
    elements = parse_content_elements("- one\n| a | b |\n| c | d |\n- two")
    assert [e.kind for e in elements] == ["bullets", "table", "bullets"]
    table = elements[1]
    assert isinstance(table, TableElement)
    assert table.column_count == 2


def test_single_pipe_line_falls_through_to_text() -> None:
    elements = parse_content_elements("| only one |\nnext line")
    assert elements == [TextElement("| only one |\nnext line")]


def test_placeholder_lookalikes_in_user_text_stay_text() -> None:
    body = "__CODE_BLOCK_0__\n__TABLE_0__\n```\nreal\n```"
    elements = parse_content_elements(body)
    assert elements[0] == TextElement("__CODE_BLOCK_0__\n__TABLE_0__")
    assert isinstance(elements[1], CodeElement)


def test_empty_body_has_no_elements() -> None:
    assert parse_content_elements("") == []
    assert parse_content_elements("\n\n  \n") == []


# ── Inline formatting ────────────────────────────────────────────────────────


def test_format_inline_bold_and_code() -> None:
    spans = format_inline("Use **bold** and `code()` here")
    assert spans == [
        InlineSpan("Use "),
        InlineSpan("bold", bold=True),
        InlineSpan(" and "),
        InlineSpan("code()", code=True),
        InlineSpan(" here"),
    ]


def test_format_inline_earliest_match_wins() -> None:
    spans = format_inline("`a **b**` c")
    assert spans == [InlineSpan("a **b**", code=True), InlineSpan(" c")]


def test_format_inline_unterminated_markers_stay_literal() -> None:
    assert format_inline("**not closed and `also not") == [
        InlineSpan("**not closed and `also not")
    ]


def test_format_inline_plain_line() -> None:
    assert format_inline("plain") == [InlineSpan("plain")]


def test_dash_without_text_stays_in_the_body_as_text() -> None:
    elements = parse_content_elements("- a\n-   \n- b")
    assert elements == [
        BulletsElement((Bullet("a"),)),
        TextElement("-"),
        BulletsElement((Bullet("b"),)),
    ]
