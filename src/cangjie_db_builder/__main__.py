"""
Module entry point for running the database builder as a module.

Usage:
    python -m cangjie_db_builder --help
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
