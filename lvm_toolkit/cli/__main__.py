#!/usr/bin/env python3
"""
Entry point for lvmtk CLI tool.
"""

import sys

from lvm_toolkit.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
