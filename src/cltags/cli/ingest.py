"""cltags ingest command - load occurrence records into the index."""

import json
from collections.abc import Iterator
from typing import BinaryIO

import click
from pydantic import ValidationError

from cltags.cli.utils import format_error, open_index_or_fail
from cltags.core.errors import CltagsError, InvalidRecordError
from cltags.core.progress import pluralize, spinner, status
from cltags.index import OccurrenceRecord


def parse_record(raw: bytes, line_no: int) -> OccurrenceRecord:
    """Parse one UTF-8 JSON-lines occurrence record."""
    try:
        line = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRecordError.malformed(line_no, f"invalid UTF-8: {e.reason}") from e
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise InvalidRecordError.malformed(line_no, e.msg) from e
    try:
        return OccurrenceRecord.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"]) or "record"
        raise InvalidRecordError.malformed(line_no, f"{field}: {err['msg']}") from e


def iter_records(stream: BinaryIO) -> Iterator[tuple[int, OccurrenceRecord]]:
    """Yield (line number, record) for every non-blank line."""
    for line_no, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        yield line_no, parse_record(line, line_no)


@click.command()
@click.argument("records", type=click.File("rb"), default="-")
@click.pass_context
def ingest_command(ctx: click.Context, records: BinaryIO) -> None:
    """Ingest occurrence records into the index.

    RECORDS is a UTF-8 JSON-lines file (default: stdin), one object per occurrence
    with keys short_name, full_name, kind, is_definition, is_implicit,
    ref_kind, file_path, dir_path, line_number, column_number, line_text.
    """
    index = open_index_or_fail(ctx, create=True)

    def report(count: int) -> None:
        status(f"{pluralize(count, 'occurrence')} recorded")

    try:
        with index, spinner(f"Ingesting into {index.path}"):
            with index.ingest(progress_callback=report) as session:
                for line_no, record in iter_records(records):
                    try:
                        session.record_occurrence(record)
                    except InvalidRecordError as e:
                        raise InvalidRecordError.malformed(line_no, e.message) from e
                summary = session.close()
    except CltagsError as e:
        status("Ingestion failed; pending fact rows were discarded", style="error")
        raise click.ClickException(format_error(e)) from e

    status(
        f"Recorded {pluralize(summary.recorded, 'occurrence')}, "
        f"skipped {pluralize(summary.skipped, 'unnamed declaration')}, "
        f"flushed {pluralize(summary.facts_flushed, 'fact row')}",
        style="success",
    )
