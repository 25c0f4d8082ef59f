"""Main entry point for EthosRadar."""

import sys

from ethosradar.cli import main as cli_main


def main():
    """Main entry point - delegates to the CLI."""
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
