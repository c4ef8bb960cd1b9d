"""Pydantic models for write-ledger entries and synchronization results."""

from collections.abc import Iterable

from pydantic import BaseModel, Field


class WriteRecord(BaseModel):
    """Ledger entry for one destination path."""

    last_write_fingerprint: int | None = None
    """Fingerprint of the destination bytes as last written (or re-confirmed)."""

    last_content_fingerprint: int | None = None
    """Fingerprint of the source content last associated with the destination."""


class LedgerState(BaseModel):
    """On-disk shape of a persisted write ledger."""

    schema_version: str = "1"
    records: dict[str, WriteRecord] = Field(default_factory=dict)


class SyncedAsset(BaseModel):
    """Outcome for one asset that was present at pass time."""

    source: str
    """Absolute source path."""

    destination: str
    """Destination path relative to the output root (POSIX separators)."""

    copied: bool
    """False when the destination already held this exact content."""


class SyncReport(BaseModel):
    """Result of one synchronization pass."""

    identifier: str
    manifest_loaded: bool = True
    assets: list[SyncedAsset] = Field(default_factory=list)

    @property
    def destinations(self) -> frozenset[str]:
        return frozenset(a.destination for a in self.assets)

    @property
    def copied(self) -> int:
        return sum(1 for a in self.assets if a.copied)

    @property
    def skipped(self) -> int:
        return sum(1 for a in self.assets if not a.copied)

    def merge_into(self, existing: Iterable[str]) -> list[str]:
        """Return *existing* followed by every synchronized destination."""
        return [*existing, *sorted(self.destinations)]
