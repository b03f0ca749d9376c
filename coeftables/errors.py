from __future__ import annotations

"""Common base for every error raised while reading or querying a table."""

__all__ = ["CoefficientTableError"]


class CoefficientTableError(Exception):
    """Base class for reader, layout and category decoding failures."""
