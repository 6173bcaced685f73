#!/usr/bin/env python3
"""Entry point for running screencap as a module.

This allows the package to be invoked with:
    python -m screencap [arguments]
"""

import sys

from screencap.cli import main

if __name__ == "__main__":
    sys.exit(main())
