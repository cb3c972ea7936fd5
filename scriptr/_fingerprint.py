"""
Source file fingerprinting for scriptr.

Provides the Fingerprint class (modification time + content hash) and the
hashing primitive shared with the cache store for deriving path keys.
"""

import hashlib
import os
import string
from pathlib import Path
from typing import Dict, Union

from ._errors import ScriptrIOError

HASH_DIGEST_SIZE = 32  # bytes, 64 hex characters
HASH_CHUNK_SIZE = 64 * 1024


def hash_bytes(data: bytes) -> str:
    """Hash raw bytes with the fingerprint hash.
    Returns: 64-character hex string (256-bit BLAKE2b hash)"""
    return hashlib.blake2b(data, digest_size=HASH_DIGEST_SIZE).hexdigest()


def hash_file(path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Hash file contents, reading in fixed-size chunks.
    The digest does not depend on chunk_size.
    Args:    path: File to hash
             chunk_size: Read size in bytes
    Returns: 64-character hex string (256-bit BLAKE2b hash)"""
    hash_obj = hashlib.blake2b(digest_size=HASH_DIGEST_SIZE)
    try:
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                hash_obj.update(chunk)
    except OSError as e:
        raise ScriptrIOError(f"cannot read {path}: {e}") from e
    return hash_obj.hexdigest()


def mtime_secs(path: Path) -> int:
    """Modification time of path in whole seconds since the epoch (truncated)."""
    try:
        return os.stat(path).st_mtime_ns // 1_000_000_000
    except OSError as e:
        raise ScriptrIOError(f"cannot stat {path}: {e}") from e


class Fingerprint:
    """Identity of a source file at a point in time.

    mtime is a cheap pre-filter; hash is the authoritative identity. Two
    fingerprints are equal only if both fields match.
    """

    def __init__(self, mtime: int, hash: str):
        self.mtime = mtime
        self.hash = hash

    @classmethod
    def from_file(cls, path: Path) -> 'Fingerprint':
        """Compute both fields from the file on disk."""
        return cls(mtime=mtime_secs(path), hash=hash_file(path))

    @classmethod
    def from_dict(cls, data: Dict) -> 'Fingerprint':
        """Load from JSON dictionary with 'mtime' and 'hash' keys.
        Raises KeyError/TypeError/ValueError on malformed data."""
        mtime = data["mtime"]
        hash = data["hash"]
        # bool is an int subclass, reject it explicitly
        if not isinstance(mtime, int) or isinstance(mtime, bool) or mtime < 0:
            raise ValueError(f"invalid mtime {mtime!r}")
        if (not isinstance(hash, str) or len(hash) != HASH_DIGEST_SIZE * 2
                or not all(c in string.hexdigits for c in hash)):
            raise ValueError(f"invalid hash {hash!r}")
        return cls(mtime=mtime, hash=hash)

    def to_dict(self) -> Dict[str, Union[int, str]]:
        return {"mtime": self.mtime, "hash": self.hash}

    def __eq__(self, other):
        if not isinstance(other, Fingerprint):
            return NotImplemented
        return self.mtime == other.mtime and self.hash == other.hash

    def __hash__(self):
        return hash((self.mtime, self.hash))

    def __repr__(self):
        return f"Fingerprint(mtime={self.mtime}, hash={self.hash[:16]}...)"
