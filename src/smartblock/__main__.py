"""Allow ``python -m smartblock``."""

from smartblock.cli import main

if __name__ == "__main__":
    main()
