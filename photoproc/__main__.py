"""
Main entry point for running the package as a module.

Usage:
    python -m photoproc init-db
    python -m photoproc process originals/p1.jpg
    python -m photoproc delete --photo-id p1 --uid u1
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
