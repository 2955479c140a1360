"""Compile markdown lesson documents into PowerPoint decks."""

from md2pptx.archive import MediaEntry, fix_media_names
from md2pptx.compiler import CompileResult, compile_deck
from md2pptx.config import StyleConfig, load_config
from md2pptx.errors import (
    AssetNotFoundError,
    MalformedFrontmatterError,
    Md2PptxError,
    MissingConfigError,
    PackagingError,
)
from md2pptx.layout import LayoutResult, Placement, flow_elements
from md2pptx.parser import (
    SlideRecord,
    SlideType,
    format_inline,
    parse_bullets,
    parse_code_blocks,
    parse_content_elements,
    parse_markdown,
    parse_tables,
    split_slides,
)

__version__ = "0.1.0"

__all__ = [
    "AssetNotFoundError",
    "CompileResult",
    "LayoutResult",
    "MalformedFrontmatterError",
    "Md2PptxError",
    "MediaEntry",
    "MissingConfigError",
    "PackagingError",
    "Placement",
    "SlideRecord",
    "SlideType",
    "StyleConfig",
    "compile_deck",
    "fix_media_names",
    "flow_elements",
    "format_inline",
    "load_config",
    "parse_bullets",
    "parse_code_blocks",
    "parse_content_elements",
    "parse_markdown",
    "parse_tables",
    "split_slides",
]
