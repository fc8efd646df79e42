"""cltags decl command - look up a symbol by qualified name."""

import click

from cltags.cli.utils import format_error, open_index_or_fail
from cltags.core.errors import CltagsError


@click.command()
@click.argument("name")
@click.pass_context
def decl_command(ctx: click.Context, name: str) -> None:
    """Print every recorded occurrence of NAME.

    NAME is a fully qualified name such as ns::Class::method. One line per
    occurrence, formatted path:line:column:source_text. Unknown names print
    nothing. Fails without creating anything if the index does not exist;
    run `cltags ingest` first.
    """
    with open_index_or_fail(ctx, create=False) as index:
        try:
            results = index.find_declaration(name)
        except CltagsError as e:
            raise click.ClickException(format_error(e)) from e

    for info in results:
        click.echo(info.format())
