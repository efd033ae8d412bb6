"""Data models for sysdiff.

This module exports the core data structures used throughout the application.
"""

from sysdiff.models.file import FileRecord, FileSet, normalize_name

__all__ = ["FileRecord", "FileSet", "normalize_name"]
