#!/usr/bin/env python3
"""Idempotence check for a static asset synchronization.

Runs two passes back to back against a scratch, in-memory write ledger and
fails unless the second pass copies nothing and leaves every ledger
fingerprint unchanged.  The first pass writes into the output root as usual;
the persisted ledger file is neither read nor written.

Usage:
    python scripts/verify_static_assets.py --identifier MySite [options]

Accepts the same options as sync_static_assets.py minus --ledger and --report.

Exit codes:
    0  — second pass was a no-op
    1  — second pass copied something, ledger drifted, or the pass failed
    2  — bad arguments
"""

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

# Ensure project root is on sys.path so app/* and synchronizers/* are importable
# when the script is invoked from any working directory.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import SyncSettings  # noqa: E402
from app.utils.logging import configure_logging  # noqa: E402
from ledger.write_ledger import WriteLedger  # noqa: E402
from storage.content_store import ContentStore  # noqa: E402
from synchronizers.static_assets import StaticAssetSynchronizer  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--identifier", "-n", required=True, metavar="NAME")
    parser.add_argument("--manifest-dir", metavar="DIR")
    parser.add_argument("--input-root", metavar="DIR")
    parser.add_argument("--output-root", metavar="DIR")
    parser.add_argument("--max-concurrency", type=int, metavar="N")
    args = parser.parse_args()

    try:
        settings = SyncSettings.from_env(
            manifest_dir=args.manifest_dir,
            input_root=args.input_root,
            output_root=args.output_root,
            max_concurrency=args.max_concurrency,
        )
        configure_logging(settings.log_level)
    except (ValidationError, ValueError) as exc:
        print(f"ERROR: invalid settings: {exc}", file=sys.stderr)
        sys.exit(2)

    async def _two_passes():
        ledger = WriteLedger()
        synchronizer = StaticAssetSynchronizer(
            ContentStore(settings.input_root, settings.output_root),
            ledger,
            settings.manifest_dir,
            settings.max_concurrency,
        )
        await synchronizer.synchronize(args.identifier)
        before = ledger.snapshot()
        second = await synchronizer.synchronize(args.identifier)
        return ledger, before, second

    try:
        ledger, before, second = asyncio.run(_two_passes())
    except (ValueError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    if second.copied:
        recopied = sorted(a.destination for a in second.assets if a.copied)
        print(f"ERROR: second pass copied {len(recopied)} assets: {recopied}", file=sys.stderr)
        sys.exit(1)

    if ledger.snapshot() != before:
        print("ERROR: write ledger changed during the second pass", file=sys.stderr)
        sys.exit(1)

    print(f"OK: static assets verified ({len(second.assets)} unchanged)")


if __name__ == "__main__":
    main()
