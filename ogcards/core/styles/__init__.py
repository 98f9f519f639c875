"""
Styles Module
=============

SCSS compilation for the stylesheet shared by preview pages.
"""
