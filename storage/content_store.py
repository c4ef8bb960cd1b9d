"""ContentStore — file access for the synchronizer.

Wraps the four operations a pass needs (exists, open for read, open for
write, fingerprint) plus a streaming copy.  Fingerprints are cached per
absolute path and reused while the file's ``(size, mtime_ns)`` stat
signature is unchanged.
"""

import os
from pathlib import Path

import aiofiles
import aiofiles.os

from storage.fingerprint import DEFAULT_CHUNK_SIZE, fingerprint_stream, new_hasher


class ContentStore:
    """Async file access rooted at an input directory and an output directory.

    Args:
        input_root:  Base directory for relative content roots.
        output_root: Directory destinations are written under.
        chunk_size:  Read size used by fingerprinting and copying.
    """

    def __init__(
        self,
        input_root: str | os.PathLike,
        output_root: str | os.PathLike,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.input_root = Path(input_root).resolve()
        self.output_root = Path(output_root).resolve()
        self.chunk_size = chunk_size
        self._cache: dict[Path, tuple[tuple[int, int], int]] = {}

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def source_path(self, content_root: str, sub_path: str) -> Path:
        """Join *content_root* and *sub_path*; relative roots hang off ``input_root``."""
        return self.input_root / content_root / sub_path

    def destination_path(self, sub_path: str) -> Path:
        return self.output_root / sub_path

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------

    async def exists(self, path: Path) -> bool:
        return await aiofiles.os.path.isfile(path)

    def open_read(self, path: Path):
        return aiofiles.open(path, "rb")

    async def open_write(self, path: Path):
        """Open *path* for writing, creating parent directories and truncating."""
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        return aiofiles.open(path, "wb")

    async def fingerprint(self, path: Path) -> int:
        """Return the content fingerprint of *path*, reusing the cache when unmodified.

        Raises:
            OSError: If the file cannot be stat'ed or read.
        """
        signature = await self._signature(path)
        cached = self._cache.get(path)
        if cached is not None and cached[0] == signature:
            return cached[1]

        async with self.open_read(path) as stream:
            value = await fingerprint_stream(stream, self.chunk_size)
        self._cache[path] = (signature, value)
        return value

    async def copy(self, source: Path, destination: Path) -> int:
        """Stream *source* into *destination* and return the written fingerprint."""
        hasher = new_hasher()
        async with self.open_read(source) as reader:
            async with await self.open_write(destination) as writer:
                while True:
                    chunk = await reader.read(self.chunk_size)
                    if not chunk:
                        break
                    hasher.update(chunk)
                    await writer.write(chunk)

        value = hasher.intdigest()
        self._cache[destination] = (await self._signature(destination), value)
        return value

    async def _signature(self, path: Path) -> tuple[int, int]:
        st = await aiofiles.os.stat(path)
        return (st.st_size, st.st_mtime_ns)
