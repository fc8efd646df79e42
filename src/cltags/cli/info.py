"""cltags info command - show schema version and row counts."""

import json

import click

from cltags.cli.utils import format_error, open_index_or_fail
from cltags.core.errors import CltagsError


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def info_command(ctx: click.Context, as_json: bool) -> None:
    """Show the index file, its schema version and per-table row counts."""
    with open_index_or_fail(ctx, create=False) as index:
        try:
            stats = index.stats()
        except CltagsError as e:
            raise click.ClickException(format_error(e)) from e

    if as_json:
        click.echo(
            json.dumps(
                {
                    "path": stats.path,
                    "schema_version": stats.schema_version,
                    "rows": stats.rows,
                }
            )
        )
        return

    click.echo(f"Index: {stats.path}")
    click.echo(f"Schema version: {stats.schema_version}")
    for table, count in stats.rows.items():
        click.echo(f"  {table}: {count}")
