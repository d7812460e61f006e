"""Main entry point for suimerger CLI when run as a module."""

from suimerger.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
