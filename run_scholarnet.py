#!/usr/bin/env python3
"""
scholarnet entry point.
"""

import sys

from scholarnet.cli import main

if __name__ == "__main__":
    sys.exit(main())
