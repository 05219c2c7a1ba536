"""
Main entry point for running daybook as a module.

Usage:
    python -m daybook [options]
"""
import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
