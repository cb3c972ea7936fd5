"""
Process handoff for scriptr.
"""

import os
import sys
from pathlib import Path
from typing import List, NoReturn

from ._errors import LaunchError


def launch(artifact: Path, args: List[str]) -> NoReturn:
    """Replace the current process image with artifact.
    argv[0] is the artifact path, followed by args unmodified and in order.
    The environment is inherited. Only returns by raising.
    Raises:  LaunchError if the artifact cannot be executed"""
    argv = [str(artifact)] + list(args)
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execv(argv[0], argv)
    except OSError as e:
        raise LaunchError(f"exec of {artifact} failed: {e}") from e
    raise LaunchError(f"exec of {artifact} returned")
