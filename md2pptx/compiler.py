"""Markdown lesson → .pptx compilation entry point."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from md2pptx.archive import MediaEntry, fix_media_names
from md2pptx.config import StyleConfig, load_config
from md2pptx.errors import PackagingError
from md2pptx.parser import parse_markdown
from md2pptx.render import DeckBuilder


@dataclass
class CompileResult:
    """What a compile call produced."""

    output_path: Path
    slide_kinds: list[str] = field(default_factory=list)
    omitted: dict[int, int] = field(default_factory=dict)
    media: list[MediaEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def num_slides(self) -> int:
        return len(self.slide_kinds)

    @property
    def total_omitted(self) -> int:
        return sum(self.omitted.values())


def temp_path_for(output_path: Path) -> Path:
    """Return the scratch path the unpatched deck is written to."""
    return output_path.with_name(f"{output_path.stem}-temp{output_path.suffix or '.pptx'}")


def compile_deck(
    markdown: str,
    output_path: Union[str, Path],
    base_dir: Union[str, Path],
    config: Optional[StyleConfig] = None,
    strategy: str = "substring",
) -> CompileResult:
    """Compile ``markdown`` into a deck at ``output_path``.

    ``config`` defaults to ``config.json`` under ``base_dir``; the logo path
    in it is resolved against ``base_dir`` too. The deck is first written to
    a temporary sibling file, then media-renamed into ``output_path``; the
    temporary file is removed whether or not that succeeds.
    """
    output_path = Path(output_path)
    base_dir = Path(base_dir)
    if config is None:
        config = load_config(base_dir)

    frontmatter, slides = parse_markdown(markdown)
    if not slides:
        warnings.warn(
            "No slides found in markdown. Check for '## [type] Title' section headers."
        )

    builder = DeckBuilder(config, base_dir)
    builder.build(frontmatter, slides)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = temp_path_for(output_path)
    try:
        try:
            builder.save(temp_path)
        except OSError as exc:
            raise PackagingError(f"Cannot write package {temp_path}: {exc}") from exc
        media = fix_media_names(temp_path, output_path, strategy=strategy)
    finally:
        temp_path.unlink(missing_ok=True)

    return CompileResult(
        output_path=output_path,
        slide_kinds=list(builder.slide_kinds),
        omitted=dict(builder.omitted),
        media=media,
        warnings=list(builder.warnings),
    )
