"""
ogcards
=======

Build-time content pipeline for a static site.

This package provides:
- Preview page synthesis for posts, pages and tag/category archives
- Browser screenshot capture of preview cards with Playwright
- Post-render HTML transforms (clickable images, heading anchors)
- A build orchestrator and command-line entry point
"""

__version__ = "1.0.0"
__author__ = "ogcards Team"
