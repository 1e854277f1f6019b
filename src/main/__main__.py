"""
Main module entry point.

Run the planner CLI as: python -m src.main plan|serve
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
