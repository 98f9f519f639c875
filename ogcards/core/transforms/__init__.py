"""
Transforms Module
=================

Post-render HTML rewrites applied to each document after rendering.

Components:
- base: Transformer interface and pipeline
- image_link: Wrap content images in links to themselves
- heading_anchor: Add self-links to headings with an id
"""
