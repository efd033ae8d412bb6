"""Exception hierarchy shared across sysdiff.

Every error that should abort a reconciliation run derives from
SysdiffError. Recoverable per-file problems are never raised; they are
logged and absorbed by the collection that met them.
"""


class SysdiffError(Exception):
    """Base exception for fatal sysdiff errors."""
