"""
Entry point for running the thunderdome package as a module.

Usage:
    python -m thunderdome --help
    python -m thunderdome bestmove --fen "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1" --depth 2
"""

import sys

from thunderdome.cli import main

if __name__ == "__main__":
    sys.exit(main())
