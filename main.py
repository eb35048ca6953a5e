#!/usr/bin/env python3
"""Main entry point for rngrename.

Equivalent to running the installed `rngrename` command.
"""

from rngrename.cli import main

if __name__ == "__main__":
    main()
