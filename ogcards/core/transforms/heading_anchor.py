"""
Heading Anchorer
================

Give every content heading with an ``id`` a self-link as its first child,
labelled with the heading text.
"""

from bs4 import BeautifulSoup

from .base import HtmlTransformer

CONTENT_HEADINGS = ", ".join(f"main h{level}[id]" for level in range(1, 7))
ANCHOR_CLASS = "heading-anchor"
ANCHOR_TEXT = "#"


class HeadingAnchorer(HtmlTransformer):
    """Insert ``<a href="#id" aria-label="...">`` into identified headings."""

    name = "heading_anchor"

    def apply(self, soup: BeautifulSoup) -> int:
        changes = 0
        for heading in soup.select(CONTENT_HEADINGS):
            identifier = heading.get("id")
            if not identifier:
                continue
            target = f"#{identifier}"
            if heading.find("a", href=target) is not None:
                continue

            label = heading.get_text(" ", strip=True) or identifier
            anchor = soup.new_tag("a", href=target)
            anchor["aria-label"] = label
            anchor["class"] = [ANCHOR_CLASS]
            anchor.string = ANCHOR_TEXT
            heading.insert(0, anchor)
            changes += 1
        return changes
