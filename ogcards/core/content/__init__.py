"""
Content Module
==============

Load posts and static pages from the site source and derive archives.
"""
