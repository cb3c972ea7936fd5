"""
Pytest configuration for scriptr tests.

Features:
- Adds the repository root to the Python path so tests can import scriptr
- Provides a fake cargo executable that replays a scripted JSON message stream
- Replaces the exec hand-off so tests can observe what would have been launched
"""
import json
import os
import sys
from pathlib import Path

import pytest

# Add parent directory to Python path so we can import scriptr
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from scriptr import Scriptr, ScriptrConfig


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "pedantic: pedantic tests that verify edge cases (can be skipped with -m 'not pedantic')"
    )
    config.addinivalue_line(
        "markers", "regression_test: tests that spawn several processes (slower)"
    )


SCRIPT_CODE = """\
fn main() {
    println!("Hello, World!");
}
"""

SCRIPT_CODE_MODIFIED = """\
fn main() {
    println!("Hello, Modified World!");
}
"""

# Replays plan.json from its own directory and records every invocation in calls.log
FAKE_CARGO_IMPL = """\
import json
import os
import sys
from pathlib import Path

here = Path(__file__).parent
plan = json.loads((here / "plan.json").read_text())
with open(here / "calls.log", "a") as f:
    f.write(json.dumps(sys.argv[1:]) + "\\n")

for line in plan.get("stdout", []):
    print(line, flush=True)
sys.stderr.write(plan.get("stderr", ""))

artifact = plan.get("artifact")
if artifact:
    Path(artifact).parent.mkdir(parents=True, exist_ok=True)
    Path(artifact).write_text("#!/bin/sh\\necho built\\n")
    os.chmod(artifact, 0o755)
    print(json.dumps({"reason": "compiler-artifact", "executable": artifact}), flush=True)

sys.exit(plan.get("exit", 0))
"""


class FakeCargo:
    """Stand-in for cargo. Configure with plan(), inspect with calls()."""

    def __init__(self, directory: Path):
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)
        impl = self.directory / "fake_cargo.py"
        impl.write_text(FAKE_CARGO_IMPL)
        # A /bin/sh wrapper keeps the shebang short regardless of where Python lives
        self.path = self.directory / "cargo"
        self.path.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{impl}" "$@"\n')
        os.chmod(self.path, 0o755)
        self.artifact = self.directory / "target" / "release" / "hello"
        self.plan()

    def plan(self, stdout=None, stderr="", exit=0, artifact=True):
        """Set the next runs' behaviour. artifact=True builds self.artifact,
        False emits none, or pass a Path to build somewhere else."""
        if artifact is True:
            artifact = self.artifact
        plan = {
            "stdout": list(stdout or []),
            "stderr": stderr,
            "exit": exit,
            "artifact": str(artifact) if artifact else None,
        }
        (self.directory / "plan.json").write_text(json.dumps(plan))

    def calls(self):
        log = self.directory / "calls.log"
        if not log.exists():
            return []
        return [json.loads(line) for line in log.read_text().splitlines()]


class Launched(Exception):
    """Raised by the patched hand-off instead of replacing the test process."""

    def __init__(self, artifact, args):
        super().__init__(f"launch {artifact}")
        self.artifact = Path(artifact)
        self.argv = list(args)


@pytest.fixture
def fake_cargo(tmp_path):
    return FakeCargo(tmp_path / "toolchain")


@pytest.fixture
def script_file(tmp_path):
    """A Rust script with a fixed, whole-second modification time."""
    script = tmp_path / "scripts" / "hello.rs"
    script.parent.mkdir()
    script.write_text(SCRIPT_CODE)
    os.utime(script, (1_700_000_000, 1_700_000_000))
    return script


@pytest.fixture
def config(tmp_path, fake_cargo):
    return ScriptrConfig(cargo=str(fake_cargo.path), cache_dir=tmp_path / "cache",
                         log_file=tmp_path / "scriptr.log")


@pytest.fixture
def app(config):
    scriptr = Scriptr(config)
    yield scriptr
    scriptr.logger.close()


@pytest.fixture
def launched(monkeypatch):
    """Patch the hand-off; the test sees Launched instead of an exec."""
    def fake_launch(artifact, args):
        raise Launched(artifact, args)

    monkeypatch.setattr("scriptr._scriptr.launch", fake_launch)
    return Launched
