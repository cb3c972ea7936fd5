#!/usr/bin/env python3
"""Unit tests for the process hand-off."""
import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from scriptr import LaunchError, launch

REPO_ROOT = Path(__file__).parent.parent.parent


def run_launch(artifact: str, args: list) -> subprocess.CompletedProcess:
    """Call launch() in a child interpreter, which it then replaces."""
    code = (
        "import sys\n"
        "from pathlib import Path\n"
        "from scriptr import launch\n"
        "launch(Path(sys.argv[1]), sys.argv[2:])\n"
    )
    env = dict(os.environ, PYTHONPATH=str(REPO_ROOT))
    return subprocess.run([sys.executable, "-c", code, artifact] + args,
                          capture_output=True, text=True, env=env)


class TestLaunch:

    def test_replaces_process_and_forwards_args(self, tmp_path):
        artifact = tmp_path / "show_args"
        artifact.write_text('#!/bin/sh\nprintf "%s|" "$0" "$@"\nexit 7\n')
        os.chmod(artifact, 0o755)

        result = run_launch(str(artifact), ["a b", "", "--flag", "-v"])

        assert result.returncode == 7
        assert result.stdout == f"{artifact}|a b||--flag|-v|"

    @pytest.mark.skipif(shutil.which("env") is None, reason="needs env(1)")
    def test_environment_is_inherited(self):
        result = run_launch(shutil.which("env"), [])
        assert f"PYTHONPATH={REPO_ROOT}" in result.stdout.splitlines()

    def test_missing_artifact(self, tmp_path):
        with pytest.raises(LaunchError) as exc_info:
            launch(tmp_path / "gone", ["x"])
        assert "gone" in str(exc_info.value)

    def test_not_executable(self, tmp_path):
        if os.geteuid() == 0:
            pytest.skip("root may execute files without the exec bit")
        artifact = tmp_path / "plain"
        artifact.write_text("#!/bin/sh\necho hi\n")
        os.chmod(artifact, 0o644)
        with pytest.raises(LaunchError):
            launch(artifact, [])

    @pytest.mark.pedantic
    def test_directory_is_not_launchable(self, tmp_path):
        with pytest.raises(LaunchError):
            launch(tmp_path, [])
