"""sysdiff - reconcile package database, disk and a git mirror."""

__version__ = "0.1.0"
