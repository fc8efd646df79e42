"""CLI utilities."""

from pathlib import Path

import click

from cltags.config.models import CltagsConfig
from cltags.core.errors import CltagsError
from cltags.index import TagsIndex


def format_error(error: CltagsError) -> str:
    """Error message followed by the failing statement or context, if known."""
    lines = [str(error)]
    context = error.details.get("context")
    if context:
        lines.append(f"While: {context}")
    statement = error.details.get("statement")
    if statement:
        lines.append("Error occurred with the following statement:")
        lines.append(str(statement).strip())
    return "\n".join(lines)


def open_index_or_fail(ctx: click.Context, *, create: bool) -> TagsIndex:
    """Open the index named on the command line, as a ClickException on failure."""
    config: CltagsConfig = ctx.obj["config"]
    index_path: Path = ctx.obj["index_path"]
    try:
        return TagsIndex.open(index_path, create=create, config=config)
    except CltagsError as e:
        raise click.ClickException(format_error(e)) from e
