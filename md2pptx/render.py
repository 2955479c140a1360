"""
Deck rendering with python-pptx.

``DeckBuilder`` always opens with a title slide built from the frontmatter and
closes with a thank-you slide. In between, ``plan`` slides become a bullet
list, ``divider`` slides a centered section title, and every other slide type
a content slide whose elements are placed by ``md2pptx.layout``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Inches, Pt

from md2pptx.config import LogoBox, StyleConfig
from md2pptx.errors import AssetNotFoundError
from md2pptx.layout import LayoutResult, flow_elements
from md2pptx.parser import (
    Bullet,
    BulletsElement,
    CodeElement,
    InlineSpan,
    SlideRecord,
    SlideType,
    TableElement,
    TextElement,
    format_inline,
    parse_bullets,
    parse_content_elements,
)

# ── Slide dimensions ──────────────────────────────────────────────────────────
SLIDE_WIDTH = 10.0  # inches
SLIDE_HEIGHT = 5.625  # inches (16:9)
CONTENT_LEFT = 0.5
CONTENT_WIDTH = 9.0
HEADER_HEIGHT = 0.85
STRIP_WIDTH = 0.3

# ── Fixed palette ─────────────────────────────────────────────────────────────
WHITE = RGBColor(0xFF, 0xFF, 0xFF)
HEADER_LEFT = RGBColor(0xD1, 0x40, 0x2B)
HEADER_RIGHT = RGBColor(0xC4, 0x4F, 0x6D)
CODE_BG = RGBColor(0xEB, 0xEC, 0xF0)
CODE_BORDER = RGBColor(0xCC, 0xCC, 0xCC)
CODE_TEXT = RGBColor(0x17, 0x2B, 0x4D)

HEADER_FONT = "Georgia"
HEADER_FONT_SIZE = 24
TABLE_HEADER_SIZE = 16
TABLE_BODY_SIZE = 14
CLOSING_TEXT = "Thank you for your attention"
DEFAULT_PLAN_TITLE = "Lesson plan"
BULLET_CHAR = "•"

# Divider overlay shadow: blur and offset in points, direction in degrees
SHADOW_BLUR = 4
SHADOW_OFFSET = 2
SHADOW_ANGLE = 90
SHADOW_OPACITY = 0.35


# ── Low-level shape helpers ───────────────────────────────────────────────────


def set_slide_background(slide, color: RGBColor = WHITE):
    """Set solid background color for a slide."""
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = color


def _set_font(
    run,
    name: str,
    size: int = 14,
    bold: bool = False,
    italic: bool = False,
    color: RGBColor = WHITE,
):
    """Apply font properties to a text run."""
    run.font.name = name
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.italic = italic
    run.font.color.rgb = color


def add_text_box(
    slide,
    text: str,
    left: float,
    top: float,
    width: float,
    height: float,
    font_name: str,
    font_size: int = 14,
    bold: bool = False,
    italic: bool = False,
    color: RGBColor = WHITE,
    align: PP_ALIGN = PP_ALIGN.LEFT,
    wrap: bool = True,
    vertical_anchor: MSO_ANCHOR = MSO_ANCHOR.TOP,
):
    """Add a text box; each line of ``text`` becomes its own paragraph."""
    box = slide.shapes.add_textbox(
        Inches(left), Inches(top), Inches(width), Inches(height)
    )
    tf = box.text_frame
    tf.word_wrap = wrap
    tf.auto_size = None
    tf.vertical_anchor = vertical_anchor

    for line_idx, line in enumerate(text.split("\n")):
        p = tf.paragraphs[0] if line_idx == 0 else tf.add_paragraph()
        p.alignment = align
        run = p.add_run()
        run.text = line
        _set_font(
            run, name=font_name, size=font_size, bold=bold, italic=italic, color=color
        )

    return box


def add_filled_box(
    slide,
    left: float,
    top: float,
    width: float,
    height: float,
    fill_color: RGBColor,
    border_color: Optional[RGBColor] = None,
    border_width: float = 1.0,
    shape_type=MSO_SHAPE.RECTANGLE,
):
    """Add a filled shape (header bars, side strips, code backgrounds)."""
    shape = slide.shapes.add_shape(
        shape_type, Inches(left), Inches(top), Inches(width), Inches(height)
    )
    shape.fill.solid()
    shape.fill.fore_color.rgb = fill_color
    if border_color:
        shape.line.color.rgb = border_color
        shape.line.width = Pt(border_width)
    else:
        shape.line.fill.background()
    return shape


def add_outer_shadow(
    shape,
    blur: float = SHADOW_BLUR,
    offset: float = SHADOW_OFFSET,
    angle: float = SHADOW_ANGLE,
    color: str = "000000",
    opacity: float = SHADOW_OPACITY,
):
    """Replace the shape's effects with a single outer shadow."""
    sp_pr = shape._element.spPr
    existing = sp_pr.find(qn("a:effectLst"))
    if existing is not None:
        sp_pr.remove(existing)

    effect_lst = OxmlElement("a:effectLst")
    shadow = OxmlElement("a:outerShdw")
    shadow.set("blurRad", str(Pt(blur)))
    shadow.set("dist", str(Pt(offset)))
    shadow.set("dir", str(int(angle * 60000)))
    shadow.set("algn", "ctr")
    shadow.set("rotWithShape", "0")
    clr = OxmlElement("a:srgbClr")
    clr.set("val", color)
    alpha = OxmlElement("a:alpha")
    alpha.set("val", str(int(opacity * 100000)))
    clr.append(alpha)
    shadow.append(clr)
    effect_lst.append(shadow)
    # effectLst follows a:ln in spPr
    sp_pr.append(effect_lst)
    return shape


def _set_bullet(paragraph, level: int):
    """Give ``paragraph`` a visible bullet glyph indented by ``level``."""
    paragraph.level = min(level, 8)
    p_pr = paragraph._p.get_or_add_pPr()
    p_pr.set("marL", str(Inches(0.3 + 0.35 * level)))
    p_pr.set("indent", str(-Inches(0.25)))
    for tag in ("a:buNone", "a:buAutoNum", "a:buChar"):
        existing = p_pr.find(qn(tag))
        if existing is not None:
            p_pr.remove(existing)
    bu_char = OxmlElement("a:buChar")
    bu_char.set("char", BULLET_CHAR)
    p_pr.append(bu_char)


class DeckBuilder:
    """Builds a lesson deck from parsed slide records."""

    def __init__(self, config: StyleConfig, base_dir: Path):
        self.config = config
        self.base_dir = Path(base_dir)
        self.prs = Presentation()
        self.prs.slide_width = Inches(SLIDE_WIDTH)
        self.prs.slide_height = Inches(SLIDE_HEIGHT)
        self.blank_layout = self.prs.slide_layouts[6]

        self.prs.core_properties.author = config.instructor_name

        # Track warnings and what was rendered
        self.warnings: list[str] = []
        self.slide_kinds: list[str] = []
        self.omitted: dict[int, int] = {}
        self._logo_checked = False
        self._logo: Optional[Path] = None

    # ── Shared pieces ────────────────────────────────────────────────────────

    def _new_slide(self, kind: str, background: RGBColor = WHITE):
        slide = self.prs.slides.add_slide(self.blank_layout)
        set_slide_background(slide, background)
        self.slide_kinds.append(kind)
        return slide

    def _accent_slide(self, kind: str):
        """Red slide with the pink left and bottom strips."""
        slide = self._new_slide(kind, self.config.color("red"))
        pink = self.config.color("pink")
        add_filled_box(slide, 0, 0, STRIP_WIDTH, SLIDE_HEIGHT, fill_color=pink)
        add_filled_box(
            slide, 0, SLIDE_HEIGHT * 0.95, SLIDE_WIDTH, SLIDE_HEIGHT * 0.05, fill_color=pink
        )
        return slide

    def _logo_file(self) -> Optional[Path]:
        """Return the logo path, or None (with a warning) when it is missing."""
        if not self._logo_checked:
            self._logo_checked = True
            path = self.config.logo_file(self.base_dir)
            if path.is_file():
                self._logo = path
            else:
                self.warnings.append(str(AssetNotFoundError(f"Logo not found, skipped: {path}")))
        return self._logo

    def _add_logo(self, slide, box: LogoBox):
        logo = self._logo_file()
        if logo is None:
            return
        slide.shapes.add_picture(
            str(logo), Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h)
        )

    def _add_runs(self, paragraph, spans: Sequence[InlineSpan], size: int, color: RGBColor):
        fonts = self.config.fonts
        for span in spans:
            if not span.text:
                continue
            run = paragraph.add_run()
            run.text = span.text
            if span.code:
                _set_font(run, name=fonts["code"], size=size, color=CODE_TEXT)
            else:
                _set_font(run, name=fonts["body"], size=size, bold=span.bold, color=color)

    def _add_bullet_box(
        self, slide, bullets: Sequence[Bullet], top: float, height: float, space_before: int
    ):
        box = slide.shapes.add_textbox(
            Inches(CONTENT_LEFT), Inches(top), Inches(CONTENT_WIDTH), Inches(height)
        )
        tf = box.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = MSO_ANCHOR.TOP
        size = self.config.sizes["body"]
        color = self.config.color("bodyText")
        for idx, bullet in enumerate(bullets):
            p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
            p.alignment = PP_ALIGN.LEFT
            p.space_before = Pt(space_before)
            p.space_after = Pt(space_before // 2)
            _set_bullet(p, bullet.level)
            self._add_runs(p, format_inline(bullet.text), size, color)
        return box

    # ── Slide kinds ──────────────────────────────────────────────────────────

    def add_title_slide(self, frontmatter: Mapping[str, Any]):
        config = self.config
        sizes = config.sizes
        slide = self._accent_slide("title")

        add_text_box(
            slide,
            "\n".join(config.institution_name),
            left=0,
            top=0.67,
            width=SLIDE_WIDTH,
            height=1.2,
            font_name=config.fonts["title"],
            font_size=sizes["institutionName"],
            bold=True,
            italic=True,
            align=PP_ALIGN.CENTER,
        )

        info = f"Discipline: {frontmatter.get('discipline') or 'Course Name'}\n\n"
        info += f"{config.lesson_type_label(frontmatter.get('type'))}\n\n"
        if frontmatter.get("module"):
            info += f"Module {frontmatter['module']}\n"
        info += f"Lesson {frontmatter.get('lesson') or '1.1: Lesson Title'}"
        add_text_box(
            slide,
            info,
            left=0.3,
            top=1.85,
            width=9.2,
            height=2.2,
            font_name=config.fonts["body"],
            font_size=sizes["lessonInfo"],
            align=PP_ALIGN.CENTER,
            vertical_anchor=MSO_ANCHOR.MIDDLE,
        )

        position = config.instructor_position
        position = position[:1].upper() + position[1:]
        instructor = (
            f"{position} {config.department}\n"
            f"{config.instructor_rank}\t{config.instructor_name}"
        )
        add_text_box(
            slide,
            instructor,
            left=5,
            top=4.2,
            width=4.5,
            height=0.8,
            font_name=config.fonts["body"],
            font_size=sizes["footer"],
            bold=True,
        )
        self._add_logo(slide, config.logo_boxes["titleSlide"])
        return slide

    def add_plan_slide(self, title: str, body: str):
        config = self.config
        slide = self._new_slide("plan")
        add_text_box(
            slide,
            title or DEFAULT_PLAN_TITLE,
            left=CONTENT_LEFT,
            top=0.2,
            width=CONTENT_WIDTH,
            height=0.6,
            font_name=config.fonts["title"],
            font_size=config.sizes["slideTitle"],
            bold=True,
            color=config.color("titleText"),
        )
        bullets = parse_bullets(body)
        if bullets:
            self._add_bullet_box(slide, bullets, top=0.9, height=4.0, space_before=8)
        return slide

    def add_divider_slide(self, title: str):
        slide = self._accent_slide("divider")
        overlay = slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE, 0, 0, self.prs.slide_width, self.prs.slide_height
        )
        overlay.fill.background()
        overlay.line.fill.background()
        add_outer_shadow(overlay)
        add_text_box(
            slide,
            title,
            left=CONTENT_LEFT,
            top=2.0,
            width=CONTENT_WIDTH,
            height=1.0,
            font_name=self.config.fonts["title"],
            font_size=self.config.sizes["dividerTitle"],
            bold=True,
            align=PP_ALIGN.CENTER,
        )
        return slide

    def add_content_slide(self, title: str, body: str, slide_num: int) -> LayoutResult:
        """Add a content slide and return the layout used for its body."""
        slide = self._new_slide("content")
        add_filled_box(slide, 0, 0, 8, HEADER_HEIGHT, fill_color=HEADER_LEFT)
        add_filled_box(slide, 8, 0, 2, HEADER_HEIGHT, fill_color=HEADER_RIGHT)
        add_text_box(
            slide,
            title,
            left=0,
            top=0.15,
            width=SLIDE_WIDTH,
            height=0.7,
            font_name=HEADER_FONT,
            font_size=HEADER_FONT_SIZE,
            italic=True,
            align=PP_ALIGN.CENTER,
        )

        elements = parse_content_elements(body)
        layout = flow_elements(elements)
        for placement in layout.included:
            element = elements[placement.element_index]
            if isinstance(element, BulletsElement):
                self._add_bullet_box(
                    slide, element.bullets, placement.y, placement.height, space_before=6
                )
            elif isinstance(element, TextElement):
                self._add_text_element(slide, element, placement.y, placement.height)
            elif isinstance(element, CodeElement):
                self._add_code_element(slide, element, placement.y, placement.height)
            elif isinstance(element, TableElement):
                self._add_table_element(
                    slide, element, placement.y, placement.height, slide_num
                )

        if layout.omitted:
            self.omitted[slide_num] = layout.omitted
            self.warnings.append(
                f"Slide {slide_num} ({title!r}): {layout.omitted} element(s) did not fit and were omitted"
            )
        return layout

    def add_closing_slide(self):
        config = self.config
        slide = self._accent_slide("closing")
        add_text_box(
            slide,
            CLOSING_TEXT,
            left=0,
            top=2.2,
            width=SLIDE_WIDTH,
            height=0.6,
            font_name=config.fonts["body"],
            font_size=config.sizes["lessonInfo"],
            align=PP_ALIGN.CENTER,
        )
        names = config.institution_name
        add_text_box(
            slide,
            f"{names[0]}\n{' '.join(names[1:])}",
            left=0.6,
            top=4.35,
            width=4,
            height=0.8,
            font_name=config.fonts["body"],
            font_size=14,
            bold=True,
        )
        self._add_logo(slide, config.logo_boxes["closingSlide"])
        self._add_logo(slide, config.logo_boxes["closingSmall"])
        return slide

    # ── Content elements ─────────────────────────────────────────────────────

    def _add_text_element(self, slide, element: TextElement, top: float, height: float):
        box = slide.shapes.add_textbox(
            Inches(CONTENT_LEFT), Inches(top), Inches(CONTENT_WIDTH), Inches(height)
        )
        tf = box.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = MSO_ANCHOR.TOP
        size = self.config.sizes["body"]
        color = self.config.color("bodyText")
        for line_idx, line in enumerate(element.text.split("\n")):
            p = tf.paragraphs[0] if line_idx == 0 else tf.add_paragraph()
            self._add_runs(p, format_inline(line), size, color)

    def _add_code_element(self, slide, element: CodeElement, top: float, height: float):
        add_filled_box(
            slide,
            CONTENT_LEFT - 0.1,
            top - 0.05,
            CONTENT_WIDTH + 0.2,
            height + 0.1,
            fill_color=CODE_BG,
            border_color=CODE_BORDER,
        )
        add_text_box(
            slide,
            element.block.code,
            left=CONTENT_LEFT,
            top=top,
            width=CONTENT_WIDTH,
            height=height,
            font_name=self.config.fonts["code"],
            font_size=self.config.sizes["code"],
            color=CODE_TEXT,
            wrap=False,
        )

    def _add_table_element(
        self, slide, element: TableElement, top: float, height: float, slide_num: int
    ):
        rows = element.rows
        num_cols = element.column_count
        if not rows or num_cols == 0 or height <= 0:
            return
        if any(len(row.cells) != num_cols for row in rows):
            self.warnings.append(
                f"Slide {slide_num}: table rows have uneven cell counts; short rows were padded"
            )

        config = self.config
        shape = slide.shapes.add_table(
            len(rows), num_cols, Inches(CONTENT_LEFT), Inches(top),
            Inches(CONTENT_WIDTH), Inches(height),
        )
        table = shape.table
        for c in range(num_cols):
            table.columns[c].width = Inches(CONTENT_WIDTH / num_cols)

        for r, row in enumerate(rows):
            size = TABLE_HEADER_SIZE if row.is_header else TABLE_BODY_SIZE
            color = WHITE if row.is_header else config.color("bodyText")
            fill = config.color("secondary") if row.is_header else WHITE
            for c in range(num_cols):
                cell = table.cell(r, c)
                cell.fill.solid()
                cell.fill.fore_color.rgb = fill
                cell.vertical_anchor = MSO_ANCHOR.MIDDLE
                p = cell.text_frame.paragraphs[0]
                p.alignment = PP_ALIGN.CENTER
                text = row.cells[c] if c < len(row.cells) else ""
                spans = format_inline(text)
                if row.is_header:
                    spans = [InlineSpan(s.text, bold=not s.code, code=s.code) for s in spans]
                self._add_runs(p, spans, size, color)

    # ── Convert & Save ───────────────────────────────────────────────────────

    def build(self, frontmatter: Mapping[str, Any], slides: Sequence[SlideRecord]):
        """Render the title slide, every record, then the closing slide."""
        self.add_title_slide(frontmatter)
        for slide_num, record in enumerate(slides, start=2):
            if record.type is SlideType.PLAN:
                self.add_plan_slide(record.title, record.raw_body)
            elif record.type is SlideType.DIVIDER:
                self.add_divider_slide(record.title)
            else:
                self.add_content_slide(record.title, record.raw_body, slide_num)
        self.add_closing_slide()
        return self.prs

    def save(self, output_path: Path):
        """Save the presentation to a file."""
        self.prs.save(str(output_path))
