"""
Elestio CLI entry point.

Usage:
    python -m elestio services list
    python -m elestio deploy postgres --wait
"""

from elestio.cli import main

if __name__ == "__main__":
    main()
