"""
Test Helpers
============

Helper functions for building site fixtures and inspecting output.
"""

from pathlib import Path
from typing import Any, Dict, Optional
import io

import yaml
from bs4 import BeautifulSoup
from PIL import Image


def make_png(width: int = 120, height: int = 63, color: str = "#dc3545") -> bytes:
    """Create real PNG bytes."""
    output = io.BytesIO()
    Image.new("RGB", (width, height), color).save(output, format="PNG")
    return output.getvalue()


def write_document(path: Path, front_matter: Optional[Dict[str, Any]], body: str = "") -> Path:
    """Write a content file with YAML front matter."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if front_matter is None:
        path.write_text(body, encoding="utf-8")
    else:
        header = yaml.safe_dump(front_matter, sort_keys=False)
        path.write_text(f"---\n{header}---\n{body}", encoding="utf-8")
    return path


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def is_png(path: Path) -> bool:
    """True when the file holds a non-empty, decodable PNG."""
    if not path.is_file() or path.stat().st_size == 0:
        return False
    with Image.open(path) as image:
        return image.format == "PNG"
