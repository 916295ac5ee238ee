"""Module entry point for running with python -m ftdbook."""

import sys

from ftdbook.cli import main

if __name__ == "__main__":
    sys.exit(main())
