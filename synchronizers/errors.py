"""Exceptions raised by the static asset synchronizer.

An absent manifest and a missing source file are normal outcomes, not
errors: :meth:`AssetManifest.load` returns ``None`` for the former and the
synchronizer silently skips the latter.  I/O failures surface as plain
``OSError``.
"""


class AssetSyncError(Exception):
    """Base class for synchronizer errors."""


class ManifestParseError(AssetSyncError, ValueError):
    """The manifest resource exists but is not valid JSON or violates the schema."""


class LedgerFormatError(AssetSyncError, ValueError):
    """The persisted write ledger cannot be decoded."""
