#!/usr/bin/env python3
"""Run one static asset synchronization pass.

Usage:
    python scripts/sync_static_assets.py --identifier MySite \\
        [--manifest-dir DIR] [--input-root DIR] [--output-root DIR] \\
        [--ledger PATH] [--max-concurrency N] [--report PATH] [--verbose]

Unset options fall back to the STATIC_ASSETS_* environment variables and
then to CWD-derived defaults (see app/config.py).

Exit codes:
    0  — pass completed (including "manifest not found")
    1  — malformed manifest or ledger, I/O failure, invalid report
    2  — bad arguments
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import jsonschema
from pydantic import ValidationError

# Ensure project root is on sys.path so app/* and synchronizers/* are importable
# when the script is invoked from any working directory.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import SyncSettings  # noqa: E402
from app.utils.logging import configure_logging  # noqa: E402
from ledger.write_ledger import WriteLedger  # noqa: E402
from models.sync import SyncReport  # noqa: E402
from storage.content_store import ContentStore  # noqa: E402
from synchronizers.static_assets import StaticAssetSynchronizer  # noqa: E402

_CONTRACTS_DIR = Path(__file__).resolve().parent.parent / "contracts" / "schemas"
_SCHEMA_REPORT = json.loads((_CONTRACTS_DIR / "SyncReport.v1.json").read_text(encoding="utf-8"))


def build_envelope(report: SyncReport) -> dict:
    """Wrap *report* in the SyncReport.v1 envelope, items sorted by destination."""
    items = sorted((a.model_dump() for a in report.assets), key=lambda a: a["destination"])
    return {
        "schema_id": "SyncReport",
        "schema_version": "1.0.0",
        "producer": "static-assets/sync_static_assets.py",
        "identifier": report.identifier,
        "manifest_loaded": report.manifest_loaded,
        "summary": {
            "total": len(report.assets),
            "copied": report.copied,
            "unchanged": report.skipped,
        },
        "items": items,
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--identifier", "-n", required=True, metavar="NAME",
                        help="Manifest identifier (usually the producing assembly/module name).")
    parser.add_argument("--manifest-dir", metavar="DIR",
                        help="Directory containing NAME.staticwebassets.runtime.json.")
    parser.add_argument("--input-root", metavar="DIR",
                        help="Base directory for relative content roots.")
    parser.add_argument("--output-root", metavar="DIR",
                        help="Directory assets are copied into.")
    parser.add_argument("--ledger", metavar="PATH",
                        help="Write ledger file (default: OUTPUT_ROOT/.staticwebassets.ledger.json).")
    parser.add_argument("--max-concurrency", type=int, metavar="N",
                        help="Maximum assets processed concurrently (default 20).")
    parser.add_argument("--report", metavar="PATH",
                        help="Write a SyncReport.v1 JSON document to PATH.")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log per-asset copied/unchanged events.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    # 1. Resolve settings
    try:
        settings = SyncSettings.from_env(
            manifest_dir=args.manifest_dir,
            input_root=args.input_root,
            output_root=args.output_root,
            ledger_path=args.ledger,
            max_concurrency=args.max_concurrency,
            log_level="DEBUG" if args.verbose else None,
        )
        configure_logging(settings.log_level)
    except (ValidationError, ValueError) as exc:
        print(f"ERROR: invalid settings: {exc}", file=sys.stderr)
        sys.exit(2)

    # 2. Load ledger, run the pass, persist the ledger
    try:
        ledger = WriteLedger.load(settings.ledger_path)
        store = ContentStore(settings.input_root, settings.output_root)
        synchronizer = StaticAssetSynchronizer(
            store, ledger, settings.manifest_dir, settings.max_concurrency
        )
        report = asyncio.run(synchronizer.synchronize(args.identifier))
        ledger.save(settings.ledger_path)
    except (ValueError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    # 3. Optional report, validated against the contract before writing
    if args.report:
        envelope = build_envelope(report)
        try:
            jsonschema.validate(instance=envelope, schema=_SCHEMA_REPORT)
        except jsonschema.ValidationError as exc:
            print(
                f"ERROR: report does not conform to SyncReport.v1.json: {exc.message}",
                file=sys.stderr,
            )
            sys.exit(1)
        report_path = Path(args.report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(json.dumps(envelope, indent=2), encoding="utf-8")

    # 4. Summary
    if not report.manifest_loaded:
        print(f"OK: manifest for {args.identifier} not found; nothing to synchronize")
        return
    print(
        f"OK: {len(report.assets)} assets; {report.copied} copied, "
        f"{report.skipped} unchanged → {settings.output_root}"
    )


if __name__ == "__main__":
    main()
