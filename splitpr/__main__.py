"""Allow running as ``python -m splitpr``."""

from splitpr.cli.main import main

if __name__ == "__main__":
    main()
