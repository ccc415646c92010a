"""Entry point for dredger.

Delegates to the Click command group, which loads configuration and
sets up logging before running a subcommand.
"""

from dredger.cli.commands import dredger


def main() -> None:
    """Launch the CLI."""
    dredger(prog_name="dredger")


if __name__ == "__main__":
    main()
