"""Entry point for ``python -m bottle_sync``."""

from bottle_sync.cli import cli

if __name__ == "__main__":
    cli()
