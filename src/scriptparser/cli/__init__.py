"""scriptparser command-line interface."""

from scriptparser.cli.main import app, main

__all__ = ["app", "main"]
