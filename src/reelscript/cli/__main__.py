"""Main entry point for reelscript CLI when run as a module."""

from reelscript.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
