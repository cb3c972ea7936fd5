"""
Run the scriptr test suite in three passes against the test directory:
the pedantic edge cases first, then the whole suite, then the multi-process
regression_test group on its own. A failing pass is re-run with --maxfail=1
so only the first failure is reported.
"""
import subprocess
import sys
from datetime import datetime


def run_test(args):
    if subprocess.run(["pytest", "-q", "test"] + args, capture_output=True, text=True).returncode != 0:
        sys.exit(subprocess.run(["pytest", "-q", "test"] + args + ["--maxfail=1"]).returncode)


if __name__ == "__main__":
    run_test(["-m", "pedantic"])
    run_test([])
    run_test(["-m", "regression_test"])
    print(f"All tests passed at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
