"""Allow ``python -m berth``."""

from berth.app import main

if __name__ == "__main__":
    main()
