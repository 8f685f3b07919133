#!/usr/bin/env python3
"""Main CLI module for ledgerlens."""

import sys
from pathlib import Path

import click

from ..config.settings import generate_example_env
from .ledgerlens_query import query_command
from .ledgerlens_rollup import rollup_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  ledgerlens query expenses.json --search rent --search-field category
  ledgerlens query expenses.yaml --where status=Approved --where status=Pending
  ledgerlens query expenses.json --range-field amount --bucket 1000_5000 --sort=-amount:number
  ledgerlens query expenses.json --date-field date --month 2024-03 --page 2 --json
  ledgerlens rollup ledger.yaml --net net=revenue-expense --tz Asia/Kolkata
  ledgerlens env-example --output .env
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="ledgerlens - query and rollup engine for tabular records",
    epilog=EPILOG,
)
def cli() -> None:
    """Root command group."""


@cli.command("env-example")
@click.option("--output", type=click.Path(path_type=Path), help="Write the example to this file")
def env_example_command(output: Path | None) -> int:
    """Print an example .env with every setting."""
    content = generate_example_env(output)
    if output is None:
        click.echo(content)
    else:
        click.echo(f"✅ Written {output}")
    return 0


cli.add_command(query_command, "query")
cli.add_command(rollup_command, "rollup")


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    if args is None:
        args = sys.argv[1:]

    try:
        return cli.main(args=list(args), standalone_mode=False) or 0
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        return 1
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 0


if __name__ == "__main__":
    sys.exit(main())
