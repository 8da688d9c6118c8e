"""Exceptions raised across the analyzer.

Missing files raise the builtin ``FileNotFoundError``. Problems inside a
readable file never raise; they are recorded on ``FileAnalysis.errors``.
"""

from __future__ import annotations


class TsdepsError(Exception):
    """Base class for analyzer failures."""


class SourceEncodingError(TsdepsError, ValueError):
    """File exists but its content does not look like source text."""

    def __init__(self, path: str):
        super().__init__(f"File encoding error: {path}")
        self.path = path


class FileParseError(TsdepsError):
    """Unexpected failure while analyzing a single file."""

    def __init__(self, path: str, reason: object):
        super().__init__(f"Failed to parse file {path}: {reason}")
        self.path = path
