"""
Rendering Module
===============

HTML rendering and PNG capture with browser automation.

Components:
- html_generator: Render documents and preview pages with Jinja2 layouts
- screenshot: Playwright browser session and element screenshot capture
- templates: Built-in layouts
"""
