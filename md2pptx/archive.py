"""
Media renaming for finished .pptx archives.

Google Slides refuses some decks whose media parts are not named
``image<N>.<ext>``. ``fix_media_names`` renumbers every part under
``ppt/media/`` in archive order and rewrites the XML and relationship parts
that mention the old names.

Two rewrite strategies exist:

* ``substring`` (default): every old basename is replaced by plain text
  substitution, one name after the other, across each ``.xml``/``.rels``
  part. A name that is a substring of another path, or a new name that is
  also an old name, gets rewritten too.
* ``xml``: each part is parsed with lxml and only attribute values whose last
  path segment equals an old basename are rewritten.
"""

from __future__ import annotations

import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Union

from lxml import etree

from md2pptx.errors import PackagingError

MEDIA_PREFIX = "ppt/media/"
TEXT_PART_SUFFIXES = (".xml", ".rels")
STRATEGIES = ("substring", "xml")

PathLike = Union[str, Path]


@dataclass(frozen=True)
class MediaEntry:
    """A media part and the name it is assigned."""

    path: str  # archive path of the part
    original_name: str
    assigned_name: str
    extension: str

    @property
    def renamed(self) -> bool:
        return self.original_name != self.assigned_name

    @property
    def new_path(self) -> str:
        return MEDIA_PREFIX + self.assigned_name if self.renamed else self.path


def plan_media_names(infos: list[zipfile.ZipInfo]) -> list[MediaEntry]:
    """Assign ``image1``, ``image2``, ... to media parts in archive order."""
    entries: list[MediaEntry] = []
    counter = 1
    for info in infos:
        if not info.filename.startswith(MEDIA_PREFIX) or info.is_dir():
            continue
        original = PurePosixPath(info.filename).name
        extension = PurePosixPath(original).suffix
        entries.append(
            MediaEntry(
                path=info.filename,
                original_name=original,
                assigned_name=f"image{counter}{extension}",
                extension=extension,
            )
        )
        counter += 1
    return entries


def _replace_substrings(data: bytes, replacements: dict[str, str]) -> bytes:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return data
    for old_name, new_name in replacements.items():
        text = text.replace(old_name, new_name)
    return text.encode("utf-8")


def _replace_attribute_references(data: bytes, replacements: dict[str, str]) -> bytes:
    try:
        root = etree.fromstring(data)
    except etree.XMLSyntaxError:
        return data

    changed = False
    for element in root.iter(tag=etree.Element):
        for attr, value in element.attrib.items():
            head, sep, tail = value.rpartition("/")
            if tail in replacements:
                element.set(attr, head + sep + replacements[tail])
                changed = True
    if not changed:
        return data
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def _clone_info(info: zipfile.ZipInfo, name: str) -> zipfile.ZipInfo:
    clone = zipfile.ZipInfo(name, date_time=info.date_time)
    clone.compress_type = info.compress_type
    clone.external_attr = info.external_attr
    clone.create_system = info.create_system
    clone.comment = info.comment
    return clone


def fix_media_names(
    source: PathLike, destination: PathLike, strategy: str = "substring"
) -> list[MediaEntry]:
    """Write ``source`` to ``destination`` with media renumbered.

    When no media part changes name the archive is copied byte for byte.
    Any failure removes the partially written ``destination`` and raises
    PackagingError.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown rewrite strategy {strategy!r}; expected one of {STRATEGIES}")

    source, destination = Path(source), Path(destination)
    if source.resolve() == destination.resolve():
        raise ValueError("Source and destination packages must be different files.")
    try:
        with zipfile.ZipFile(source) as archive:
            media = plan_media_names(archive.infolist())
    except (OSError, zipfile.BadZipFile) as exc:
        raise PackagingError(f"Cannot read package {source}: {exc}") from exc

    renamed = [entry for entry in media if entry.renamed]
    try:
        if not renamed:
            shutil.copyfile(source, destination)
            return media

        replacements: dict[str, str] = {}
        for entry in renamed:
            # The first part with a given basename decides its replacement
            replacements.setdefault(entry.original_name, entry.assigned_name)
        new_paths = {entry.path: entry.new_path for entry in renamed}
        rewrite = _replace_substrings if strategy == "substring" else _replace_attribute_references

        with zipfile.ZipFile(source) as archive, zipfile.ZipFile(destination, "w") as output:
            for info in archive.infolist():
                data = archive.read(info)
                name = new_paths.get(info.filename, info.filename)
                if name.endswith(TEXT_PART_SUFFIXES):
                    data = rewrite(data, replacements)
                output.writestr(_clone_info(info, name), data)
    except (OSError, zipfile.BadZipFile, RuntimeError, NotImplementedError) as exc:
        destination.unlink(missing_ok=True)
        raise PackagingError(f"Cannot write package {destination}: {exc}") from exc

    return media
