"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Build settings and environment configuration
- logging: Structured logging configuration
"""
