"""
Cache management for scriptr.

Provides CacheEntry and ScriptCache classes. The cache holds one JSON entry per
absolute script path, named by a hash of that path, recording the script's
fingerprint at build time and the path of the executable the build produced.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

import fasteners

from ._errors import CorruptCacheError, ScriptrIOError
from ._fingerprint import Fingerprint, hash_bytes


class CacheEntry:
    """Persisted metadata for one script: fingerprint plus artifact path."""

    def __init__(self, fingerprint: Fingerprint, artifact_path: Path):
        self.fingerprint = fingerprint
        self.artifact_path = artifact_path

    @classmethod
    def from_dict(cls, data: Dict) -> 'CacheEntry':
        """Load from JSON dictionary with 'fingerprint' and 'bin' keys.
        Raises:  CorruptCacheError if any field is missing or has the wrong type"""
        try:
            fingerprint = Fingerprint.from_dict(data["fingerprint"])
            artifact = data["bin"]
            if not isinstance(artifact, str) or not artifact:
                raise ValueError(f"invalid artifact path {artifact!r}")
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptCacheError(f"malformed cache entry: {e}") from e
        return cls(fingerprint, Path(artifact))

    @classmethod
    def from_file(cls, entry_file: Path) -> 'CacheEntry':
        """Read an entry file.
        Raises:  FileNotFoundError if there is no entry
                 CorruptCacheError if the file is not a valid entry
                 OSError for any other read failure"""
        with open(entry_file, 'rb') as f:
            raw = f.read()
        try:
            data = json.loads(raw.decode('utf-8'))
        except (ValueError, RecursionError) as e:
            raise CorruptCacheError(f"cache entry {entry_file} is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict:
        return {
            "fingerprint": self.fingerprint.to_dict(),
            "bin": str(self.artifact_path),
        }

    def __eq__(self, other):
        if not isinstance(other, CacheEntry):
            return NotImplemented
        return self.fingerprint == other.fingerprint and self.artifact_path == other.artifact_path

    def __repr__(self):
        return f"CacheEntry({self.fingerprint!r}, bin={str(self.artifact_path)!r})"


class ScriptCache:
    """Key-value store of CacheEntry objects, one file per key.

    Writers serialize on a per-key lock file, write a temporary file and rename
    it over the entry, so readers see either the old entry or the new one.
    Entries are never evicted; they are replaced by store() or dropped by remove().
    """

    ENTRY_SUFFIX = ".json"
    TEMP_SUFFIX = ".json.new"
    LOCK_SUFFIX = ".lock"

    def __init__(self, cache_dir: Path, logger: Optional[logging.Logger] = None):
        """Create the cache directory if needed.
        Args:    cache_dir: Directory holding the entry files
                 logger: Logger for corrupt-entry reports (defaults to 'scriptr')
        Raises:  ScriptrIOError if the directory cannot be created"""
        self.cache_dir = cache_dir
        self.logger = logger or logging.getLogger("scriptr")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ScriptrIOError(f"cannot create cache directory {cache_dir}: {e}") from e

    @staticmethod
    def key_for(script: Path) -> str:
        """Derive the cache key from the script's absolute, canonical path.
        Keyed by path, not contents: identical files at two paths get two entries."""
        return hash_bytes(os.fsencode(str(script)))

    def entry_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{self.ENTRY_SUFFIX}"

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """Look up the entry for key.
        Returns: CacheEntry, or None if there is no entry or it cannot be parsed
        Raises:  ScriptrIOError if an existing entry cannot be read"""
        entry_file = self.entry_path(key)
        try:
            return CacheEntry.from_file(entry_file)
        except FileNotFoundError:
            return None
        except CorruptCacheError as e:
            self.logger.debug(f"Ignoring corrupt cache entry: {e}")
            return None
        except OSError as e:
            raise ScriptrIOError(f"cannot read cache entry {entry_file}: {e}") from e

    def store(self, key: str, entry: CacheEntry):
        """Atomically replace the entry for key.
        Raises:  ScriptrIOError if the entry cannot be written"""
        entry_file = self.entry_path(key)
        temp_file = self.cache_dir / f"{key}{self.TEMP_SUFFIX}"
        lock = fasteners.InterProcessLock(str(self.cache_dir / f"{key}{self.LOCK_SUFFIX}"))
        try:
            with lock:
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(entry.to_dict(), f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_file, entry_file)
        except OSError as e:
            raise ScriptrIOError(f"cannot write cache entry {entry_file}: {e}") from e

    def remove(self, key: str) -> bool:
        """Delete the entry for key.
        Returns: True if an entry was removed, False if there was none
        Raises:  ScriptrIOError if the entry exists but cannot be deleted"""
        entry_file = self.entry_path(key)
        try:
            entry_file.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise ScriptrIOError(f"cannot remove cache entry {entry_file}: {e}") from e
        return True
