"""Runtime settings for a synchronization pass.

Every value follows the same priority chain:
  1. Explicit argument to :meth:`SyncSettings.from_env`
  2. Environment variable (``STATIC_ASSETS_*``)
  3. CWD-derived default
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_MAX_CONCURRENCY = 20

# Ledger file name, placed under the output root unless overridden.
LEDGER_FILE_NAME = ".staticwebassets.ledger.json"

_ENV_PREFIX = "STATIC_ASSETS_"


def _env(name: str) -> str | None:
    return os.environ.get(_ENV_PREFIX + name) or None


class SyncSettings(BaseModel):
    """Resolved configuration for one synchronization pass."""

    manifest_dir: Path
    """Directory holding ``{identifier}.staticwebassets.runtime.json``."""

    input_root: Path
    """Base for content roots given as relative paths."""

    output_root: Path
    """Directory assets are copied into."""

    ledger_path: Path
    """JSON file the write ledger is loaded from and saved to."""

    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        manifest_dir: str | os.PathLike | None = None,
        input_root: str | os.PathLike | None = None,
        output_root: str | os.PathLike | None = None,
        ledger_path: str | os.PathLike | None = None,
        max_concurrency: int | None = None,
        log_level: str | None = None,
    ) -> "SyncSettings":
        cwd = Path.cwd()

        output = Path(output_root or _env("OUTPUT_ROOT") or cwd / "output").resolve()
        ledger = ledger_path or _env("LEDGER") or output / LEDGER_FILE_NAME

        concurrency = max_concurrency
        if concurrency is None:
            raw = _env("MAX_CONCURRENCY")
            concurrency = int(raw) if raw is not None else DEFAULT_MAX_CONCURRENCY

        return cls(
            manifest_dir=Path(manifest_dir or _env("MANIFEST_DIR") or cwd).resolve(),
            input_root=Path(input_root or _env("INPUT_ROOT") or cwd).resolve(),
            output_root=output,
            ledger_path=Path(ledger).resolve(),
            max_concurrency=concurrency,
            log_level=log_level or _env("LOG_LEVEL") or "INFO",
        )
