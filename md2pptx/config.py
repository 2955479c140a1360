"""
Style configuration for generated decks.

The configuration file (``config.json`` beside the assets by default) carries
colors, fonts, font sizes, institution and instructor text, and the logo
placement boxes. JSON is the native format; ``.yaml``/``.yml`` files are read
with PyYAML.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from pptx.dml.color import RGBColor

from md2pptx.errors import MissingConfigError

CONFIG_FILENAME = "config.json"

REQUIRED_COLORS = ("red", "pink", "titleText", "bodyText", "secondary")
REQUIRED_FONTS = ("title", "body", "code")
REQUIRED_SIZES = (
    "institutionName",
    "lessonInfo",
    "slideTitle",
    "body",
    "code",
    "dividerTitle",
    "footer",
)
LOGO_BOXES = ("titleSlide", "closingSlide", "closingSmall")

DEFAULT_LESSON_TYPES = {"lecture": "Lecture"}


# ── Helper: hex string → RGBColor ────────────────────────────────────────────
def hex_to_rgb(hex_str: str) -> Optional[RGBColor]:
    """Convert #RGB or #RRGGBB to RGBColor."""
    hex_str = hex_str.strip().lstrip("#")
    if len(hex_str) == 3:
        hex_str = "".join(c * 2 for c in hex_str)
    if len(hex_str) != 6:
        return None
    try:
        r, g, b = int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16)
        return RGBColor(r, g, b)
    except ValueError:
        return None


@dataclass(frozen=True)
class LogoBox:
    """Position and size of a logo picture, in inches."""

    x: float
    y: float
    w: float
    h: float


@dataclass
class StyleConfig:
    """Colors, fonts and institution text consumed by the deck builder."""

    colors: dict[str, RGBColor]
    fonts: dict[str, str]
    sizes: dict[str, int]
    institution_name: list[str]
    department: str
    instructor_name: str
    instructor_position: str
    instructor_rank: str
    logo_path: str
    logo_boxes: dict[str, LogoBox]
    lesson_types: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_LESSON_TYPES)
    )

    def color(self, name: str) -> RGBColor:
        return self.colors[name]

    def lesson_type_label(self, lesson_type: Optional[str]) -> str:
        """Resolve a frontmatter ``type`` to its display label."""
        if lesson_type and lesson_type in self.lesson_types:
            return self.lesson_types[lesson_type]
        return self.lesson_types.get("lecture", "Lecture")

    def logo_file(self, base_dir: Path) -> Path:
        return Path(base_dir) / self.logo_path

    # ── Loading ──────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StyleConfig":
        """Build a config from parsed data, validating required keys."""
        if not isinstance(data, dict):
            raise MissingConfigError("Style configuration must be a mapping.")

        colors_raw = _section(data, "colors", REQUIRED_COLORS)
        colors: dict[str, RGBColor] = {}
        for name, value in colors_raw.items():
            rgb = hex_to_rgb(str(value))
            if rgb is None:
                raise MissingConfigError(f"Invalid color for '{name}': {value!r}")
            colors[name] = rgb

        fonts = {k: str(v) for k, v in _section(data, "fonts", REQUIRED_FONTS).items()}
        sizes_raw = _section(data, "sizes", REQUIRED_SIZES)
        try:
            sizes = {k: int(v) for k, v in sizes_raw.items()}
        except (TypeError, ValueError) as exc:
            raise MissingConfigError(f"Font sizes must be integers: {exc}") from exc

        institution = _section(data, "institution", ("name", "department"))
        names = institution["name"]
        if isinstance(names, str):
            names = [names]
        if not isinstance(names, list) or any(
            isinstance(n, (dict, list)) for n in names
        ):
            raise MissingConfigError(
                f"'institution.name' must be a string or a list of strings: {names!r}"
            )
        if not names:
            raise MissingConfigError("'institution.name' must not be empty.")

        instructor = _section(data, "instructor", ("name", "position", "rank"))
        logo = _section(data, "logo", ("path",) + LOGO_BOXES)
        boxes: dict[str, LogoBox] = {}
        for key in LOGO_BOXES:
            box = logo[key]
            try:
                boxes[key] = LogoBox(
                    float(box["x"]), float(box["y"]), float(box["w"]), float(box["h"])
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise MissingConfigError(f"Invalid logo box 'logo.{key}': {box!r}") from exc

        lesson_types = data.get("lessonTypes") or dict(DEFAULT_LESSON_TYPES)
        if not isinstance(lesson_types, dict):
            raise MissingConfigError(f"'lessonTypes' must be a mapping: {lesson_types!r}")

        return cls(
            colors=colors,
            fonts=fonts,
            sizes=sizes,
            institution_name=[str(n) for n in names],
            department=str(institution["department"]),
            instructor_name=str(instructor["name"]),
            instructor_position=str(instructor["position"]),
            instructor_rank=str(instructor["rank"]),
            logo_path=str(logo["path"]),
            logo_boxes=boxes,
            lesson_types={str(k): str(v) for k, v in lesson_types.items()},
        )

    @classmethod
    def from_file(cls, path: Path) -> "StyleConfig":
        """Load and validate a JSON or YAML configuration file."""
        path = Path(path)
        if not path.is_file():
            raise MissingConfigError(f"Style configuration not found: {path}")
        try:
            raw = path.read_text(encoding="utf-8")
            if path.suffix.lower() in {".yaml", ".yml"}:
                data = yaml.safe_load(raw)
            else:
                data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise MissingConfigError(f"Unable to parse {path}: {exc}") from exc
        return cls.from_dict(data)


def _section(data: dict[str, Any], name: str, required: tuple[str, ...]) -> dict[str, Any]:
    section = data.get(name)
    if not isinstance(section, dict):
        raise MissingConfigError(f"Missing '{name}' section in style configuration.")
    missing = [key for key in required if key not in section]
    if missing:
        keys = ", ".join(f"{name}.{key}" for key in missing)
        raise MissingConfigError(f"Missing required config keys: {keys}")
    return section


def load_config(base_dir: Path, config_path: Optional[Path] = None) -> StyleConfig:
    """Load ``config_path`` or the default ``config.json`` under ``base_dir``."""
    path = Path(config_path) if config_path else Path(base_dir) / CONFIG_FILENAME
    return StyleConfig.from_file(path)
