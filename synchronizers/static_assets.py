"""StaticAssetSynchronizer — incremental copy of manifest-declared assets.

One pass:
  1. Load ``{identifier}.staticwebassets.runtime.json`` from ``manifest_dir``.
     Absent → log ``manifest_not_loaded`` and return an empty report.
     No content roots or no root node → empty report, no error.
  2. Flatten the manifest tree (pre-order) into a list of assets.
  3. Run one task per asset, at most ``max_concurrency`` holding the
     semaphore at once.  Each task:
       - skips silently when the source file is missing;
       - skips the copy when the ledger's last-write fingerprint matches the
         destination on disk AND the last-content fingerprint matches the
         source, re-recording both;
       - otherwise copies and records the written and content fingerprints.
  4. Gather unordered; the first failure cancels the remaining tasks and
     propagates.

Two assets declaring the same destination race on that path's ledger entry;
the outcome is undefined.  Sub-paths are relative and cannot leave the
output root; the manifest model rejects anything else.
"""

import asyncio
import os
from pathlib import Path

from app.config import DEFAULT_MAX_CONCURRENCY
from app.models.asset_manifest import AssetManifest, StaticWebAsset
from app.utils.logging import get_logger
from ledger.write_ledger import WriteLedger
from models.sync import SyncedAsset, SyncReport
from storage.content_store import ContentStore


class StaticAssetSynchronizer:
    """Copy changed assets from their content roots into the output root.

    Usage::

        store = ContentStore(input_root=".", output_root="output")
        ledger = WriteLedger.load("output/.staticwebassets.ledger.json")
        sync = StaticAssetSynchronizer(store, ledger, manifest_dir="bin")
        report = await sync.synchronize("MySite")

    Args:
        store: File access for sources and destinations.
        ledger: Write ledger shared by every task in the pass.
        manifest_dir: Directory the manifest file is looked up in.
        max_concurrency: Upper bound on assets processed at once.
    """

    def __init__(
        self,
        store: ContentStore,
        ledger: WriteLedger,
        manifest_dir: str | os.PathLike,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.store = store
        self.ledger = ledger
        self.manifest_dir = Path(manifest_dir)
        self.max_concurrency = max_concurrency
        self._log = get_logger("synchronizers.static_assets")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def synchronize(self, identifier: str) -> SyncReport:
        """Run one synchronization pass for the manifest named *identifier*.

        Raises:
            ManifestParseError: If the manifest exists but is malformed.
            OSError: On the first unrecoverable read or write failure.
        """
        manifest = AssetManifest.load(identifier, self.manifest_dir)
        if manifest is None:
            self._log.info(
                "manifest_not_loaded",
                identifier=identifier,
                manifest_dir=str(self.manifest_dir),
            )
            return SyncReport(identifier=identifier, manifest_loaded=False)

        if not manifest.is_usable:
            return SyncReport(identifier=identifier)

        assets = list(manifest.enumerate_assets())
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            asyncio.create_task(self._sync_one(manifest, asset, semaphore))
            for asset in assets
        ]

        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        report = SyncReport(
            identifier=identifier,
            assets=[o for o in outcomes if o is not None],
        )
        self._log.info(
            "sync_pass_complete",
            identifier=identifier,
            declared=len(assets),
            synchronized=len(report.assets),
            copied=report.copied,
            unchanged=report.skipped,
        )
        return report

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _sync_one(
        self,
        manifest: AssetManifest,
        asset: StaticWebAsset,
        semaphore: asyncio.Semaphore,
    ) -> SyncedAsset | None:
        async with semaphore:
            content_root, sub_path = manifest.resolve(asset)
            source = self.store.source_path(content_root, sub_path)
            if not await self.store.exists(source):
                return None

            destination = Path(sub_path).as_posix()
            output = self.store.destination_path(sub_path)
            content_hash = await self.store.fingerprint(source)

            # Skip only if the destination is untouched and holds this content.
            previous_write = self.ledger.try_get_last_write(destination)
            if (
                previous_write is not None
                and self.ledger.try_get_last_content(destination) == content_hash
                and await self.store.exists(output)
                and previous_write == await self.store.fingerprint(output)
            ):
                self.ledger.record_write(destination, previous_write)
                self.ledger.record_content(destination, content_hash)
                self._log.debug(
                    "static_asset_not_copied",
                    source=str(source),
                    destination=destination,
                )
                return SyncedAsset(source=str(source), destination=destination, copied=False)

            written = await self.store.copy(source, output)
            self.ledger.record_write(destination, written)
            self.ledger.record_content(destination, content_hash)
            self._log.debug(
                "static_asset_copied",
                source=str(source),
                destination=destination,
            )
            return SyncedAsset(source=str(source), destination=destination, copied=True)
