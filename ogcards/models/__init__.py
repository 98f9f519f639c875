"""
Data Models
===========

Pydantic models for documents, preview pages, capture requests and reports.
"""
