"""
Jam Directory — Entry Point.

Single entry point: `python main.py <command>` runs the schedule CLI.
"""

import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.cli import main

if __name__ == "__main__":
    sys.exit(main())
