"""
Generation Module
=================

Preview page synthesis and document classification.
"""
