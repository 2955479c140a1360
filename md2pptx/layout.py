"""
Vertical flow of content elements on a slide.

Elements are stacked top to bottom from ``TOP_OFFSET``. Each element gets an
estimated height from its type, then the cursor advances by that height plus
a per-type gap. Once the cursor reaches ``FLOW_CAPACITY`` every remaining
element is omitted; nothing is reflowed onto another slide.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from md2pptx.parser import (
    BulletsElement,
    CodeElement,
    ContentElement,
    TableElement,
    TextElement,
)

# ── Flow region (inches) ──────────────────────────────────────────────────────
TOP_OFFSET = 0.9
FLOW_CAPACITY = 5.0

# ── Height estimation ─────────────────────────────────────────────────────────
BULLET_LINE_HEIGHT = 0.4
TEXT_BLOCK_HEIGHT = 1.2
CODE_LINE_HEIGHT = 0.28
CODE_MIN_HEIGHT = 1.2
CODE_BOTTOM_MARGIN = 0.3
TABLE_ROW_HEIGHT = 0.4
TABLE_BOTTOM_MARGIN = 0.1

# ── Gaps after each element type ──────────────────────────────────────────────
GAP_BULLETS = 0.15
GAP_TEXT = 0.10
GAP_CODE = 0.25
GAP_TABLE = 0.20


@dataclass(frozen=True)
class Placement:
    """Where an element lands, or that it was dropped."""

    element_index: int
    y: float  # inches from the slide top
    height: float  # inches
    included: bool = True


@dataclass
class LayoutResult:
    """Placements for every element of a slide, in element order."""

    placements: list[Placement] = field(default_factory=list)
    final_y: float = TOP_OFFSET

    @property
    def included(self) -> list[Placement]:
        return [p for p in self.placements if p.included]

    @property
    def omitted(self) -> int:
        return sum(1 for p in self.placements if not p.included)


def estimate_height(element: ContentElement, y: float, capacity: float = FLOW_CAPACITY) -> float:
    """Return the height ``element`` takes when placed at ``y``."""
    remaining = capacity - y
    if isinstance(element, BulletsElement):
        height = min(len(element.bullets) * BULLET_LINE_HEIGHT, remaining)
    elif isinstance(element, TextElement):
        height = min(TEXT_BLOCK_HEIGHT, remaining)
    elif isinstance(element, CodeElement):
        lines = len(element.block.code.split("\n"))
        height = min(
            max(lines * CODE_LINE_HEIGHT, CODE_MIN_HEIGHT),
            remaining - CODE_BOTTOM_MARGIN,
        )
    elif isinstance(element, TableElement):
        height = min(len(element.rows) * TABLE_ROW_HEIGHT, remaining - TABLE_BOTTOM_MARGIN)
    else:
        raise TypeError(f"Unknown content element: {element!r}")
    # Bottom margins can exceed what is left near the end of the region
    return max(height, 0.0)


def gap_after(element: ContentElement) -> float:
    """Return the vertical gap that follows ``element``."""
    if isinstance(element, BulletsElement):
        return GAP_BULLETS
    if isinstance(element, TextElement):
        return GAP_TEXT
    if isinstance(element, CodeElement):
        return GAP_CODE
    if isinstance(element, TableElement):
        return GAP_TABLE
    raise TypeError(f"Unknown content element: {element!r}")


def flow_elements(
    elements: Sequence[ContentElement],
    capacity: float = FLOW_CAPACITY,
    top: float = TOP_OFFSET,
) -> LayoutResult:
    """Greedily place ``elements`` between ``top`` and ``capacity``.

    Every element gets a Placement. Elements reached after the cursor hits
    ``capacity`` are marked ``included=False`` with zero height, and
    ``LayoutResult.omitted`` counts them.
    """
    result = LayoutResult(final_y=top)
    y_pos = top
    for index, element in enumerate(elements):
        if y_pos >= capacity:
            result.placements.append(Placement(index, y_pos, 0.0, included=False))
            continue
        height = estimate_height(element, y_pos, capacity)
        result.placements.append(Placement(index, y_pos, height))
        y_pos += height + gap_after(element)
    result.final_y = y_pos
    return result
