"""Allow ``python -m idwatch``."""

from idwatch.cli import main

if __name__ == "__main__":
    main()
