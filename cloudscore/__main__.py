#!/usr/bin/env python3
"""
Enable running cloudscore commands via: python -m cloudscore

Usage:
    python -m cloudscore ping
    python -m cloudscore list arena --limit 10
"""

import sys


def main():
    """Route to the CLI."""
    from cloudscore.cli import main as cli_main

    sys.exit(cli_main())


if __name__ == "__main__":
    main()
