"""Main entry point for ``python -m lxdimage``."""

from lxdimage.cli.main import main


if __name__ == "__main__":
    main()
