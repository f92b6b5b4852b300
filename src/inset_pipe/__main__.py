"""Module entry-point: ``python -m inset_pipe``.

Without arguments this prints the version and exits successfully.
"""

from __future__ import annotations

import sys

from inset_pipe.cli import main


def _run() -> int:
    argv = sys.argv[1:] or ["version"]
    return main(argv)


if __name__ == "__main__":
    sys.exit(_run())
