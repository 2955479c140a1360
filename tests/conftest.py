import base64
import json
from pathlib import Path

import pytest

from md2pptx.config import StyleConfig

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def make_config_data() -> dict:
    return {
        "colors": {
            "red": "#D04A02",
            "pink": "#DB536A",
            "titleText": "#000000",
            "bodyText": "#333333",
            "secondary": "#F15A22",
        },
        "fonts": {"title": "Georgia", "body": "Arial", "code": "Consolas"},
        "sizes": {
            "institutionName": 20,
            "lessonInfo": 22,
            "slideTitle": 28,
            "body": 18,
            "code": 12,
            "dividerTitle": 36,
            "footer": 12,
        },
        "institution": {
            "name": ["Institute of Technology", "Faculty of Computing"],
            "department": "of the Computing Department",
        },
        "instructor": {"name": "J. Doe", "position": "lecturer", "rank": "PhD"},
        "logo": {
            "path": "assets/logo.png",
            "titleSlide": {"x": 0.6, "y": 4.1, "w": 0.9, "h": 0.9},
            "closingSlide": {"x": 3.75, "y": 0.5, "w": 2.5, "h": 1.5},
            "closingSmall": {"x": 8.8, "y": 4.3, "w": 0.7, "h": 0.7},
        },
        "lessonTypes": {"lecture": "Lecture", "practice": "Practical lesson"},
    }


@pytest.fixture
def config_data() -> dict:
    return make_config_data()


@pytest.fixture
def style_config(config_data) -> StyleConfig:
    return StyleConfig.from_dict(config_data)


@pytest.fixture
def base_dir(tmp_path: Path, config_data) -> Path:
    """A base directory with config.json but no logo."""
    root = tmp_path / "base"
    root.mkdir()
    (root / "config.json").write_text(json.dumps(config_data), encoding="utf-8")
    return root


@pytest.fixture
def base_dir_with_logo(base_dir: Path) -> Path:
    assets = base_dir / "assets"
    assets.mkdir()
    (assets / "logo.png").write_bytes(PNG_BYTES)
    return base_dir
