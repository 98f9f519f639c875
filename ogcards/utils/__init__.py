"""
Utilities
=========

Shared helpers for slug and title handling.
"""
