"""scriptr - Fast launcher for Rust single-file packages

scriptr builds a single-file Rust script with `cargo -Zscript` once, remembers
the produced executable, and on later runs execs it directly as long as the
script is unchanged (same modification time, or same content hash).

Example usage:
    from pathlib import Path
    from scriptr import RunOptions, Scriptr

    app = Scriptr()
    app.run(RunOptions(Path("hello.rs"), args=["--name", "world"]))  # does not return
"""

from ._cache import CacheEntry, ScriptCache
from ._cargo import BuildMessages, CargoScriptBuilder
from ._config import ScriptrConfig
from ._errors import (BuildError, ConfigError, CorruptCacheError, LaunchError, NoArtifactError,
                      PathError, ScriptrError, ScriptrIOError)
from ._exec import launch
from ._fingerprint import Fingerprint
from ._scriptr import RunOptions, Scriptr

__all__ = [
    'BuildError', 'BuildMessages', 'CacheEntry', 'CargoScriptBuilder', 'ConfigError',
    'CorruptCacheError', 'Fingerprint', 'LaunchError', 'NoArtifactError', 'PathError',
    'RunOptions', 'ScriptCache', 'Scriptr', 'ScriptrConfig', 'ScriptrError', 'ScriptrIOError',
    'launch',
]
