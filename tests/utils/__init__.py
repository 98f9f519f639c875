"""
Test Utilities
==============

Fakes and helpers shared by the unit and integration tests.
"""
