"""Allow running as ``python -m trackrules.cli``."""

from trackrules.cli import main

if __name__ == "__main__":
    main()
