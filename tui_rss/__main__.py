"""Main module for tui_rss.

This module allows the reader to be run as a Python module using:
python -m tui_rss

It delegates to the CLI's main function.
"""

from tui_rss.cli import main

if __name__ == "__main__":
    main()
