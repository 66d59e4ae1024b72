"""
Package entry point.

Allows running the CLI via:

    python -m campusnav

This simply forwards execution to campusnav.cli.main().
"""

from campusnav.cli import main

if __name__ == "__main__":
    main()
