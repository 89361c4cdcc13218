"""
pocketsql/__main__.py

Package entry point for running PocketSQL as a module:

    python -m pocketsql [data_dir]

This also serves as the target for the console script entry point defined in
pyproject.toml:

    pocketsql [data_dir]
"""

from __future__ import annotations

import sys

from .repl import main as repl_main


def main() -> int:
    """
    Entry point for `python -m pocketsql` and the installed `pocketsql` command.

    Returns:
        Exit code (0 for normal exit).
    """
    return int(repl_main(sys.argv))


if __name__ == "__main__":
    raise SystemExit(main())
