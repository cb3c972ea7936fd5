"""
Configuration for scriptr.

Defaults, overridden by an optional JSON file (~/.scriptr/config.json or
$SCRIPTR_CONFIG), overridden by $SCRIPTR_CACHE_DIR.
"""

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ._errors import ConfigError

NAME = "scriptr"

_UNSET = object()


def default_cache_dir(environ: Mapping[str, str] = os.environ) -> Path:
    """Platform cache directory joined with 'scriptr'.
    Falls back to the system temp directory when there is no home directory."""
    xdg = environ.get("XDG_CACHE_HOME")
    if sys.platform == "win32":
        local = environ.get("LOCALAPPDATA")
        if local:
            return Path(local) / NAME
    elif sys.platform != "darwin" and xdg and Path(xdg).is_absolute():
        return Path(xdg) / NAME
    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        return Path(tempfile.gettempdir()) / NAME
    if sys.platform == "darwin":
        return home / "Library" / "Caches" / NAME
    return home / ".cache" / NAME


def default_config_file(environ: Mapping[str, str] = os.environ) -> Optional[Path]:
    if environ.get("SCRIPTR_CONFIG"):
        return Path(environ["SCRIPTR_CONFIG"])
    try:
        return Path.home() / f".{NAME}" / "config.json"
    except (RuntimeError, KeyError):
        return None


class ScriptrConfig:
    """Settings for the toolchain, cache location and log file."""

    def __init__(self, cargo: str = "cargo", toolchain: Optional[str] = "+nightly",
                 cache_dir: Optional[Path] = None, log_file=_UNSET,
                 build_args: Optional[List[str]] = None):
        """Args:    cargo: cargo executable
                    toolchain: rustup toolchain selector, or None/'' to omit it
                    cache_dir: Cache directory (defaults to default_cache_dir())
                    log_file: Log file path, None to disable (defaults to <cache_dir>/scriptr.log)
                    build_args: Extra arguments for the build command"""
        self.cargo = cargo
        self.toolchain = toolchain or None
        self.cache_dir = cache_dir if cache_dir is not None else default_cache_dir()
        self.log_file = self.cache_dir / f"{NAME}.log" if log_file is _UNSET else log_file
        self.build_args = list(build_args or [])

    @classmethod
    def from_dict(cls, data: Dict) -> 'ScriptrConfig':
        """Build from a parsed config file.
        Raises:  ConfigError on unknown keys or wrongly typed values"""
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a JSON object")
        known = {"cargo", "toolchain", "cache_dir", "log_file", "build_args"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown configuration keys: {', '.join(unknown)}")

        kwargs = {}
        if "cargo" in data:
            kwargs["cargo"] = _expect_str(data, "cargo")
        if "toolchain" in data:
            kwargs["toolchain"] = _expect_str(data, "toolchain", optional=True)
        if "cache_dir" in data:
            kwargs["cache_dir"] = Path(_expect_str(data, "cache_dir")).expanduser()
        if "log_file" in data:
            log_file = _expect_str(data, "log_file", optional=True)
            kwargs["log_file"] = Path(log_file).expanduser() if log_file else None
        if "build_args" in data:
            build_args = data["build_args"]
            if not isinstance(build_args, list) or not all(isinstance(a, str) for a in build_args):
                raise ConfigError("'build_args' must be a list of strings")
            kwargs["build_args"] = build_args
        return cls(**kwargs)

    @classmethod
    def load(cls, config_file: Optional[Path] = None,
             environ: Mapping[str, str] = os.environ) -> 'ScriptrConfig':
        """Load configuration from file and environment.
        Args:    config_file: Config file path (defaults to default_config_file())
                 environ: Environment used for overrides
        Raises:  ConfigError if the file exists but is invalid"""
        path = config_file if config_file is not None else default_config_file(environ)
        data = {}
        if path is not None:
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except FileNotFoundError:
                data = {}
            except (OSError, ValueError) as e:
                raise ConfigError(f"cannot load configuration {path}: {e}") from e

        config = cls.from_dict(data)
        if environ.get("SCRIPTR_CACHE_DIR"):
            cache_dir = Path(environ["SCRIPTR_CACHE_DIR"])
            if "log_file" not in data:
                config.log_file = cache_dir / f"{NAME}.log"
            config.cache_dir = cache_dir
        return config

    def __repr__(self):
        return (f"ScriptrConfig(cargo={self.cargo!r}, toolchain={self.toolchain!r}, "
                f"cache_dir={str(self.cache_dir)!r})")


def _expect_str(data: Dict, key: str, optional: bool = False) -> Optional[str]:
    value = data[key]
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    return value
