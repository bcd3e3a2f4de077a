"""Allow ``python -m foodchain``."""

from .cli import main

if __name__ == "__main__":
    main()
