#!/usr/bin/env python3
"""static-assets — CLI for the static asset synchronizer.

Usage:
    static-assets sync   --identifier NAME [options]
    static-assets verify --identifier NAME [options]

Subcommands:
    sync      Run one synchronization pass (scripts/sync_static_assets.py).
    verify    Run two passes and assert the second copies nothing
              (scripts/verify_static_assets.py).

Exit codes are those of the delegated script; 2 for unknown subcommands.
"""
import subprocess
import sys
from pathlib import Path

_SCRIPTS_DIR = Path(__file__).resolve().parent
_SUBCOMMANDS = {
    "sync": _SCRIPTS_DIR / "sync_static_assets.py",
    "verify": _SCRIPTS_DIR / "verify_static_assets.py",
}

_USAGE = """\
Usage:
  static-assets sync   --identifier NAME [options]
  static-assets verify --identifier NAME [options]
"""


def run(subcmd: str, argv: list[str]) -> int:
    """Delegate *argv* to the script behind *subcmd* and return its exit code."""
    script = _SUBCOMMANDS.get(subcmd)
    if script is None:
        print(f"Unknown subcommand: {subcmd!r}\n{_USAGE}", file=sys.stderr)
        return 2
    return subprocess.run([sys.executable, str(script), *argv]).returncode


def main() -> None:
    if len(sys.argv) < 2:
        print(_USAGE, file=sys.stderr)
        sys.exit(2)
    sys.exit(run(sys.argv[1], sys.argv[2:]))


if __name__ == "__main__":
    main()
