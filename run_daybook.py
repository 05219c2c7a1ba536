#!/usr/bin/env python3
"""
Convenience script to print a society's day book.

Usage:
    # Today's day book for the society selected in the app
    python run_daybook.py

    # Specific society and date
    python run_daybook.py --society 3f1c... --date 2024-01-15

    # JSON for other tools
    python run_daybook.py --date 2024-01-15 --format json
"""
import sys

# Add project root to path for imports
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

from daybook.cli import main

if __name__ == "__main__":
    sys.exit(main())
