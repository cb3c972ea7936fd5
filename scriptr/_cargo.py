"""
Build orchestration for scriptr.

Runs `cargo -Zscript build` against a single-file script, consumes its
line-delimited JSON message stream and locates the produced executable.
"""

import json
import logging
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from ._errors import BuildError, NoArtifactError

ARTIFACT_REASON = "compiler-artifact"
MESSAGE_REASON = "compiler-message"


class BuildMessages:
    """Accumulates the records of interest from cargo's JSON message stream.

    Unknown record kinds and lines that are not JSON objects are ignored, so
    new record types from newer toolchains do not break parsing.
    """

    def __init__(self):
        self.artifact: Optional[Path] = None
        self.diagnostics: List[str] = []

    def feed(self, line: str):
        """Consume one line of the stream."""
        line = line.strip()
        if not line:
            return
        try:
            record = json.loads(line)
        except ValueError:
            return
        if not isinstance(record, dict):
            return

        reason = record.get("reason")
        if reason == ARTIFACT_REASON:
            executable = record.get("executable")
            if isinstance(executable, str) and executable:
                # Last artifact wins: only the final binary matters
                self.artifact = Path(executable)
        elif reason == MESSAGE_REASON:
            message = record.get("message")
            rendered = message.get("rendered") if isinstance(message, dict) else None
            if isinstance(rendered, str):
                self.diagnostics.append(rendered)

    @classmethod
    def parse(cls, lines: Iterable[str]) -> 'BuildMessages':
        messages = cls()
        for line in lines:
            messages.feed(line)
        return messages


class CargoScriptBuilder:
    """Builds single-file Rust scripts with cargo's script mode."""

    def __init__(self, cargo: str = "cargo", toolchain: Optional[str] = "+nightly",
                 build_args: Optional[List[str]] = None, logger: Optional[logging.Logger] = None,
                 stderr: Optional[TextIO] = None):
        """Args:    cargo: cargo executable (name on PATH or full path)
                    toolchain: rustup toolchain selector such as '+nightly', or None
                    build_args: Extra arguments appended to the build command
                    logger: Logger for the verbose trace
                    stderr: Stream receiving diagnostics on failure (defaults to sys.stderr)"""
        self.cargo = cargo
        self.toolchain = toolchain
        self.build_args = list(build_args or [])
        self.logger = logger or logging.getLogger("scriptr")
        self._stderr = stderr

    @property
    def stderr(self) -> TextIO:
        # Resolved lazily so pytest's capture replacement of sys.stderr is honoured
        return self._stderr if self._stderr is not None else sys.stderr

    def build_command(self, script: Path, release: bool, verbose: bool) -> List[str]:
        """Build the complete cargo command line for script."""
        cmd = [self.cargo]
        if self.toolchain:
            cmd.append(self.toolchain)
        cmd += ["-Zscript", "build", "--manifest-path", str(script), "--message-format=json"]
        if not verbose:
            cmd.append("--quiet")
        if release:
            cmd.append("--release")
        return cmd + self.build_args

    def rebuild(self, script: Path, release: bool, verbose: bool) -> Path:
        """Build script and return the path of the produced executable.
        Args:    script: Absolute path of the script
                 release: Build optimized instead of debug
                 verbose: Let cargo's stderr through instead of capturing it
        Returns: Path of the last executable reported by cargo
        Raises:  BuildError if cargo cannot be started or exits non-zero
                 NoArtifactError if cargo succeeds without reporting an executable"""
        cmd = self.build_command(script, release, verbose)
        self.logger.debug(f"Running: {' '.join(cmd)}")

        # Captured stderr goes to a spool file so a chatty cargo cannot block
        # on a full pipe while we are still reading stdout.
        with tempfile.TemporaryFile(mode='w+', encoding='utf-8', errors='replace') as err_file:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=None if verbose else err_file,
                    text=True,
                    encoding='utf-8',
                    errors='replace',
                )
            except OSError as e:
                raise BuildError(f"failed to spawn {self.cargo}: {e}") from e

            with process:
                messages = BuildMessages.parse(process.stdout)
                returncode = process.wait()

            err_file.seek(0)
            captured_stderr = err_file.read()

        if returncode != 0:
            self._report(messages.diagnostics, captured_stderr)
            raise BuildError(
                f"cargo build failed with exit status {returncode}",
                returncode=returncode,
                diagnostics=messages.diagnostics,
                stderr=captured_stderr,
            )

        for diagnostic in messages.diagnostics:
            self.logger.debug(diagnostic.rstrip())

        if messages.artifact is None:
            self._report(messages.diagnostics, captured_stderr)
            raise NoArtifactError(
                "cargo build succeeded but reported no executable artifact",
                diagnostics=messages.diagnostics,
                stderr=captured_stderr,
            )

        self.logger.debug(f"Built executable: {messages.artifact}")
        return messages.artifact

    def _report(self, diagnostics: List[str], captured_stderr: str):
        """Write collected diagnostics, then captured stderr, to the error stream."""
        for diagnostic in diagnostics:
            self.stderr.write(diagnostic)
            if not diagnostic.endswith("\n"):
                self.stderr.write("\n")
        if captured_stderr:
            self.stderr.write(captured_stderr)
        self.stderr.flush()
