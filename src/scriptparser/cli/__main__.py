"""Main entry point for scriptparser CLI when run as a module."""

from scriptparser.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
