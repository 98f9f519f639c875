"""
Build Module
============

Build orchestration: generate, render, capture, finalize.
"""
