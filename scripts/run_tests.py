"""Local test runner mirroring the CI split.

`pytest -m smoke` *selects* the end-to-end pipeline runs; everything else is
fast unit coverage of the individual stages.

Usage
-----
  python scripts/run_tests.py ci      # fast, then smoke (stops on failure)
  python scripts/run_tests.py fast
  python scripts/run_tests.py smoke
  python scripts/run_tests.py all
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _run(cmd: list[str]) -> int:
    print("\n$", " ".join(cmd))
    return subprocess.call(cmd, cwd=str(_repo_root()))


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run inset-pipe test suites")
    ap.add_argument(
        "suite",
        nargs="?",
        default="ci",
        choices=["ci", "fast", "smoke", "all"],
        help="Which suite to run (default: ci)",
    )
    ap.add_argument("--quiet", action="store_true", help="Pass -q to pytest")
    args = ap.parse_args(argv)

    pytest_cmd = [sys.executable, "-m", "pytest", *(["-q"] if args.quiet else [])]
    suites = {
        "fast": [["-m", "not smoke"]],
        "smoke": [["-m", "smoke"]],
        "all": [[]],
        "ci": [["-m", "not smoke"], ["-m", "smoke"]],
    }
    for extra in suites[args.suite]:
        code = _run([*pytest_cmd, *extra])
        if code != 0:
            return code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
