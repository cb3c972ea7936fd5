"""
Error types for scriptr.

Every failure that ends an invocation is a ScriptrError. Only CorruptCacheError
is recovered from (the cache store reports a miss instead).
"""

from typing import List, Optional


class ScriptrError(Exception):
    """Base class for all scriptr failures."""


class PathError(ScriptrError):
    """Script path does not exist or cannot be resolved."""


class ScriptrIOError(ScriptrError):
    """Cache directory, cache file or script file could not be read or written."""


class CorruptCacheError(ScriptrError):
    """A cache entry exists but cannot be parsed."""


class ConfigError(ScriptrError):
    """Configuration file is unreadable or malformed."""


class BuildError(ScriptrError):
    """The external toolchain reported a failed build.

    Carries the collected compiler diagnostics (in emission order), the captured
    standard error text and the exit status. returncode is None when the
    toolchain could not be started at all."""

    def __init__(self, message: str, returncode: Optional[int] = None,
                 diagnostics: Optional[List[str]] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.diagnostics = list(diagnostics or [])
        self.stderr = stderr


class NoArtifactError(BuildError):
    """The toolchain exited successfully but never reported an executable."""

    def __init__(self, message: str, diagnostics: Optional[List[str]] = None, stderr: str = ""):
        super().__init__(message, returncode=0, diagnostics=diagnostics, stderr=stderr)


class LaunchError(ScriptrError):
    """The artifact could not be executed at hand-off time."""
