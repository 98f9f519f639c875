"""
Image Linker
============

Make content images clickable: every image inside ``<main>`` that is not
already linked is wrapped in a link to its own source and followed by a
"Click to expand" hint.
"""

from bs4 import BeautifulSoup

from .base import HtmlTransformer

CONTENT_IMAGES = "main img"
LINK_CLASSES = ["border", "d-block", "text-center"]
HINT_CLASSES = ["d-inline-block", "py-3"]
HINT_TEXT = "Click to expand"


class ImageLinker(HtmlTransformer):
    """Wrap bare content images in links to themselves."""

    name = "image_link"

    def apply(self, soup: BeautifulSoup) -> int:
        changes = 0
        for img in soup.select(CONTENT_IMAGES):
            if img.parent is not None and img.parent.name == "a":
                continue
            src = img.get("src")
            if not src:
                continue

            link = soup.new_tag("a", href=src)
            link["class"] = list(LINK_CLASSES)
            img.wrap(link)

            hint = soup.new_tag("span")
            hint["class"] = list(HINT_CLASSES)
            hint.string = HINT_TEXT
            img.insert_after(hint)
            changes += 1
        return changes
