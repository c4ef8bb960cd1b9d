"""Content fingerprints for source and destination files.

Uses xxh3-64: non-cryptographic but fast, and equal fingerprints are treated
as equal content.  Adversarial collisions are out of scope.
"""

import xxhash

# 1 MiB reads keep memory flat for large assets.
DEFAULT_CHUNK_SIZE = 1024 * 1024


def new_hasher() -> "xxhash.xxh3_64":
    """Return a fresh incremental hasher."""
    return xxhash.xxh3_64()


def fingerprint_bytes(data: bytes) -> int:
    """Return the fingerprint of an in-memory byte string."""
    return xxhash.xxh3_64_intdigest(data)


async def fingerprint_stream(stream, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Fingerprint an async binary stream (e.g. an ``aiofiles`` handle) chunk by chunk.

    Raises:
        OSError: If the stream cannot be read.
    """
    hasher = new_hasher()
    while True:
        chunk = await stream.read(chunk_size)
        if not chunk:
            break
        hasher.update(chunk)
    return hasher.intdigest()
