#!/usr/bin/env python3
"""
main.py - Quick-start entry point.

Drop photos into ``images/`` and run:

    python main.py render

Or use the full CLI:

    python -m picwall.cli render --help
    python -m picwall.cli layout photos/ --size 3:2 --json
"""

from picwall.cli import app

if __name__ == "__main__":
    app()
