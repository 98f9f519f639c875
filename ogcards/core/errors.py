"""
Pipeline Errors
===============

Base exception shared by every stage. Each stage defines its own subclass
beside the code that raises it.
"""


class OgcardsError(Exception):
    """Base class for errors that abort a build."""

    pass


class ConfigurationError(OgcardsError):
    """Exception raised when the build is misconfigured."""

    pass
