"""Allow running dashsync with ``python -m dashsync``."""

from dashsync.cli import cli_main

if __name__ == "__main__":
    cli_main()
