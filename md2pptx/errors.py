"""Exception hierarchy for markdown deck compilation."""

from __future__ import annotations


class Md2PptxError(RuntimeError):
    """Base error for deck compilation failures."""


class MalformedFrontmatterError(Md2PptxError):
    """Raised when the leading frontmatter block is missing or unparsable."""


class MissingConfigError(Md2PptxError):
    """Raised when the style configuration is absent or incomplete."""


class AssetNotFoundError(Md2PptxError):
    """Raised when a referenced asset such as the logo cannot be located."""


class PackagingError(Md2PptxError):
    """Raised when the deck archive cannot be read or written."""


__all__ = [
    "AssetNotFoundError",
    "MalformedFrontmatterError",
    "Md2PptxError",
    "MissingConfigError",
    "PackagingError",
]
