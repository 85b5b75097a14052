"""Skiff CLI entry point."""

from skiff.cli import app

if __name__ == "__main__":
    app()
