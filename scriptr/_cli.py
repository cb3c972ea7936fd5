"""
Command line interface for scriptr.

Usage:
    scriptr script.rs [args...]           # Build if needed, then run
    scriptr -v script.rs --flag           # Verbose trace; everything after the script goes to it
    scriptr -C script.rs                  # Drop the cached entry and exit
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ._config import ScriptrConfig
from ._errors import ScriptrError
from ._scriptr import RunOptions, Scriptr

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scriptr", description="Fast launcher for Rust single-file packages",
                                     formatter_class=argparse.RawDescriptionHelpFormatter)

    parser.add_argument("--version",          action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-d", "--debug",      action="store_true", help="Build in debug mode (default is release)")
    parser.add_argument("-v", "--verbose",    action="store_true", help="Verbose output")
    parser.add_argument("-f", "--force",      action="store_true", help="Force rebuild (ignore cache)")
    parser.add_argument("-c", "--clean",      action="store_true", help="Clean cache before building")
    parser.add_argument("-C", "--clean-only", action="store_true", help="Clean cache and exit (don't run)")
    parser.add_argument("-H", "--hash-only",  action="store_true",
                        help="Always compare content hashes (skip the modification time check)")
    parser.add_argument("script", type=Path, help="Path to the Rust script (.rs)")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments passed to the script binary")
    return parser


def parse_args(args: Optional[List[str]] = None) -> RunOptions:
    """Parse the command line into RunOptions.
    Everything after the script is passed through verbatim, including any '--'.
    A '--' before the script only ends scriptr's own options."""
    argv = list(sys.argv[1:] if args is None else args)

    # Options take no values, so the first non-option token is the script
    split = len(argv)
    for i, arg in enumerate(argv):
        if arg == "--" or arg == "-" or not arg.startswith("-"):
            split = i
            break
    head, tail = argv[:split], argv[split:]
    if tail and tail[0] == "--":
        tail = tail[1:]

    parser = build_parser()
    if not tail:
        # Handles -h and --version, otherwise reports the missing script
        parser.parse_args(head)
        parser.error("the following arguments are required: script")
    script, passthrough = tail[0], tail[1:]
    parsed = parser.parse_args(head + (["--", script] if script.startswith("-") else [script]))

    return RunOptions(
        script=parsed.script,
        args=passthrough,
        debug=parsed.debug,
        verbose=parsed.verbose,
        force=parsed.force,
        clean=parsed.clean,
        clean_only=parsed.clean_only,
        hash_only=parsed.hash_only,
    )


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point. Only returns on failure or after --clean-only."""
    options = parse_args(args)
    try:
        app = Scriptr(ScriptrConfig.load(), verbose=options.verbose)
        return app.run(options)
    except ScriptrError as e:
        print(f"scriptr: error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
