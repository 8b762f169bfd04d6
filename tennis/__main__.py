"""Module entry to run the CLI with python -m tennis.

This delegates to the main function in the CLI module.
"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
