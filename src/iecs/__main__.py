"""
Main entry point for iecs.

This module allows iecs to be run as:
    python -m iecs
"""

from .cli.main import main

if __name__ == "__main__":
    main()
