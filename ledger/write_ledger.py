"""WriteLedger — what each destination held when it was last written.

The ledger is an in-memory map for the duration of a pass.  Durable storage
is the caller's concern: load it with :meth:`WriteLedger.load` before a pass
and :meth:`WriteLedger.save` it afterwards.

Each method mutates a single record without awaiting, so updates to one
path are atomic under the asyncio event loop.  Nothing spans more than one
path and a crash mid-pass simply leaves a partially refreshed ledger.
"""

import os
from pathlib import Path

from pydantic import ValidationError

from app.utils.logging import get_logger
from models.sync import LedgerState, WriteRecord
from synchronizers.errors import LedgerFormatError

logger = get_logger("ledger.write_ledger")


def _key(path: str | os.PathLike) -> str:
    return Path(path).as_posix()


class WriteLedger:
    """Per-destination write and content fingerprints, keyed by relative path."""

    def __init__(self, records: dict[str, WriteRecord] | None = None) -> None:
        self._records: dict[str, WriteRecord] = dict(records or {})

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, os.PathLike)) and _key(path) in self._records

    def get(self, path: str | os.PathLike) -> WriteRecord | None:
        return self._records.get(_key(path))

    def try_get_last_write(self, path: str | os.PathLike) -> int | None:
        record = self._records.get(_key(path))
        return record.last_write_fingerprint if record else None

    def try_get_last_content(self, path: str | os.PathLike) -> int | None:
        record = self._records.get(_key(path))
        return record.last_content_fingerprint if record else None

    def record_write(self, path: str | os.PathLike, fingerprint: int) -> None:
        self._records.setdefault(_key(path), WriteRecord()).last_write_fingerprint = fingerprint

    def record_content(self, path: str | os.PathLike, fingerprint: int) -> None:
        self._records.setdefault(_key(path), WriteRecord()).last_content_fingerprint = fingerprint

    def snapshot(self) -> dict[str, WriteRecord]:
        """Return a deep copy of every record, for comparisons across passes."""
        return {k: v.model_copy() for k, v in self._records.items()}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | os.PathLike) -> "WriteLedger":
        """Read a ledger file; a missing file yields an empty ledger.

        Raises:
            LedgerFormatError: If the file is not a valid ledger document.
        """
        path = Path(path)
        if not path.exists():
            return cls()

        try:
            state = LedgerState.model_validate_json(path.read_bytes())
        except ValidationError as exc:
            raise LedgerFormatError(f"malformed write ledger {path}: {exc}") from exc

        logger.debug("ledger_loaded", path=str(path), records=len(state.records))
        return cls(state.records)

    def save(self, path: str | os.PathLike) -> None:
        """Write the ledger to *path*, replacing any previous file atomically."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        state = LedgerState(records=dict(sorted(self._records.items())))
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)

        logger.debug("ledger_saved", path=str(path), records=len(self._records))
