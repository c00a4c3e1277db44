"""Main entry point when executing snapcache as a package.

This allows running the CLI using python -m snapcache.
"""

from snapcache.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
