"""
Test Suite
==========

Test suite matching the ogcards/ package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: End-to-end builds with a fake browser session
"""
