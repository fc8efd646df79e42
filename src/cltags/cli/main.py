"""cltags CLI - cltags command."""

from pathlib import Path

import click

from cltags.cli.decl import decl_command
from cltags.cli.info import info_command
from cltags.cli.ingest import ingest_command
from cltags.config import load_config, resolve_index_path
from cltags.core.errors import ConfigError
from cltags.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="cltags")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--index",
    "index_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Index file (default: ./CLTAGS, or index.path from config)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, index_path: Path | None) -> None:
    """cltags - declaration index for C and C++ sources."""
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["index_path"] = index_path or resolve_index_path(config)


cli.add_command(decl_command, name="decl")
cli.add_command(ingest_command, name="ingest")
cli.add_command(info_command, name="info")


if __name__ == "__main__":
    cli()
