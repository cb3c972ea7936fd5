"""
Main scriptr application.

Decides whether the cached executable for a script is still valid, rebuilds it
when it is not, and hands the process over to the executable.
"""

import time
from pathlib import Path
from typing import List, Optional

from ._cache import CacheEntry, ScriptCache
from ._cargo import CargoScriptBuilder
from ._config import ScriptrConfig
from ._errors import PathError
from ._exec import launch
from ._fingerprint import Fingerprint, hash_file, mtime_secs
from ._logger import ScriptrLogger


class RunOptions:
    """Parsed command line for one invocation."""

    def __init__(self, script: Path, args: Optional[List[str]] = None, debug: bool = False,
                 verbose: bool = False, force: bool = False, clean: bool = False,
                 clean_only: bool = False, hash_only: bool = False):
        self.script = script
        self.args = list(args or [])
        self.debug = debug
        self.verbose = verbose
        self.force = force
        self.clean = clean
        self.clean_only = clean_only
        self.hash_only = hash_only

    @property
    def release(self) -> bool:
        return not self.debug


class Scriptr:
    """Main scriptr application."""

    def __init__(self, config: Optional[ScriptrConfig] = None, verbose: bool = False):
        """Set up logging, the cache store and the builder from config.
        Args:    config: Settings (defaults to ScriptrConfig.load())
                 verbose: Emit the diagnostic trace on stderr
        Raises:  ConfigError, ScriptrIOError"""
        self.config = config if config is not None else ScriptrConfig.load()
        self.logger = ScriptrLogger(verbose=verbose, log_file=self.config.log_file)
        self.cache = ScriptCache(self.config.cache_dir, self.logger)
        self.builder = CargoScriptBuilder(self.config.cargo, self.config.toolchain,
                                          self.config.build_args, self.logger)

    @staticmethod
    def resolve(script: Path) -> Path:
        """Canonicalize script to an absolute path with symlinks resolved.
        Raises:  PathError if it does not exist or cannot be resolved"""
        try:
            return Path(script).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise PathError(f"cannot resolve path {str(script)!r}: {e}") from e

    def prepare(self, options: RunOptions) -> Optional[Path]:
        """Run every step up to the hand-off.
        Returns: Executable to launch, or None after a completed clean-only run"""
        start_time = time.perf_counter()
        script = self.resolve(options.script)
        self.logger.debug(f"Script: {script}")

        key = self.cache.key_for(script)
        self.logger.debug(f"Cache path: {self.cache.entry_path(key)}")

        if options.clean or options.clean_only:
            if self.cache.remove(key):
                self.logger.debug(f"Removed cache: {self.cache.entry_path(key)}")
            else:
                self.logger.debug("No cache to clean")
            if options.clean_only:
                self.logger.debug("Clean complete, exiting")
                return None

        if options.force:
            self.logger.debug("Force rebuild requested")
        else:
            cached = self._check_cache(key, script, options.hash_only)
            if cached is not None:
                self.logger.info(f"CACHE HIT - script: {script}, "
                                 f"Time: {time.perf_counter() - start_time:.3f} seconds, bin: {cached}")
                return cached

        self.logger.debug("Building script...")
        artifact = self.builder.rebuild(script, options.release, options.verbose)

        # Both fields are always recomputed, whichever check led here
        fingerprint = Fingerprint.from_file(script)
        self.logger.debug("Writing cache metadata")
        self.cache.store(key, CacheEntry(fingerprint, artifact))

        self.logger.info(f"CACHE MISS - script: {script}, "
                         f"Time: {time.perf_counter() - start_time:.3f} seconds, "
                         f"release: {options.release}, bin: {artifact}")
        return artifact

    def _check_cache(self, key: str, script: Path, hash_only: bool) -> Optional[Path]:
        """Return the cached executable if the entry is still valid for script."""
        entry = self.cache.lookup(key)
        if entry is None:
            self.logger.debug("No cache found")
            return None

        stored = entry.fingerprint
        if not hash_only:
            current_mtime = mtime_secs(script)
            self.logger.debug(f"Cached mtime: {stored.mtime}, current mtime: {current_mtime}")
            if current_mtime == stored.mtime:
                if not entry.artifact_path.exists():
                    self.logger.debug(f"Cached binary is missing: {entry.artifact_path}")
                    return None
                self.logger.debug(f"mtime unchanged, using cached binary: {entry.artifact_path}")
                return entry.artifact_path
            self.logger.debug("mtime changed, checking hash...")
        else:
            self.logger.debug("Hash-only mode, checking hash...")

        current_hash = hash_file(script)
        self.logger.debug(f"Cached hash: {stored.hash[:16]}, current hash: {current_hash[:16]}")
        if current_hash != stored.hash:
            self.logger.debug("Hash changed")
            return None
        if not entry.artifact_path.exists():
            self.logger.debug(f"Cached binary is missing: {entry.artifact_path}")
            return None
        self.logger.debug(f"Hash unchanged, using cached binary: {entry.artifact_path}")
        return entry.artifact_path

    def run(self, options: RunOptions) -> int:
        """Main execution: resolve, clean, check the cache, rebuild if needed, exec.
        Returns: 0 after a clean-only run; otherwise never returns
        Raises:  ScriptrError subclasses on any failure"""
        artifact = self.prepare(options)
        if artifact is None:
            return 0
        self.logger.debug(f"Executing: {artifact}")
        launch(artifact, options.args)
