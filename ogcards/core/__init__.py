"""
Core Pipeline
=============

Content loading, preview page generation, rendering, capture and
post-render transforms.

Components:
- content: Read posts and pages, derive tag/category archives
- styles: SCSS compilation for the shared stylesheet
- generation: Preview page synthesis
- rendering: Jinja2 site rendering and Playwright screenshot capture
- transforms: Post-render HTML rewrites
- build: Build orchestration
"""
