"""Logging functionality for scriptr."""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO


class ScriptrLogger(logging.Logger):
    """Logger for scriptr invocations.

    Verbose trace goes to stderr; per-invocation summaries go to the log file.
    """

    def __init__(self, verbose: bool = False, log_file: Optional[Path] = None,
                 stream: Optional[TextIO] = None):
        """Initialize logger with stderr and file handlers.
        Args:    verbose: Emit the DEBUG trace on stream
                 log_file: File receiving INFO summaries, or None to disable
                 stream: Trace stream (defaults to sys.stderr)"""
        super().__init__("scriptr", logging.DEBUG)

        # Remove existing handlers to avoid duplicates
        self.handlers.clear()

        if verbose:
            console = logging.StreamHandler(stream if stream is not None else sys.stderr)
            console.setLevel(logging.DEBUG)
            console.setFormatter(logging.Formatter('[scriptr] %(message)s'))
            self.addHandler(console)

        if log_file is not None:
            try:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                handler = logging.FileHandler(log_file, encoding='utf-8')
            except OSError as e:
                # The log file is optional; a read-only cache dir must not stop the run
                self.warning(f"Cannot open log file {log_file}: {e}")
            else:
                handler.setLevel(logging.INFO)
                # Format: timestamp - level - message
                handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
                self.addHandler(handler)

        if not self.handlers:
            self.addHandler(logging.NullHandler())

    def close(self):
        """Close and detach all handlers."""
        for handler in list(self.handlers):
            handler.close()
            self.removeHandler(handler)
