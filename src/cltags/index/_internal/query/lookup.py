"""Declaration lookup by qualified name.

Joins decl_refs -> declarations -> symbol_names (full_name match) ->
source_lines -> file source_paths -> directory source_paths. Read-only: it
never touches the ingestion caches, so a lookup-only process needs none.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import aliased
from sqlmodel import select

from cltags.core.errors import StorageIOError
from cltags.index.models import (
    Declaration,
    DeclInfo,
    DeclKind,
    DeclRef,
    RefKind,
    SourceLine,
    SourcePath,
    SymbolName,
)

if TYPE_CHECKING:
    from cltags.index._internal.db import Database

logger = structlog.get_logger()


def join_source_path(dirname: str | None, pathname: str) -> str:
    """Inverse of split_source_path: ``dirname + "/" + pathname``.

    Absolute pathnames were stored verbatim and are returned as is.
    """
    if not dirname or pathname.startswith("/"):
        return pathname
    return f"{dirname.rstrip('/')}/{pathname}"


def find_declaration(db: Database, qualified_name: str) -> list[DeclInfo]:
    """Every recorded occurrence of the symbol with this full name.

    Ordered by insertion of the fact rows, which is stable for an unchanged
    index. An unknown name yields an empty list.

    Raises:
        StorageIOError: The query failed.
    """
    FilePath = aliased(SourcePath)  # noqa: N806
    DirPath = aliased(SourcePath)  # noqa: N806

    stmt = (
        select(
            DeclRef.declaration_id,
            DirPath.pathname,
            FilePath.pathname,
            SourceLine.lineno,
            DeclRef.colno,
            SourceLine.text,
            DeclRef.ref_kind,
            Declaration.kind,
            Declaration.is_definition,
            DeclRef.is_implicit,
        )
        .join(Declaration, DeclRef.declaration_id == Declaration.id)
        .join(SymbolName, Declaration.symbol_name_id == SymbolName.id)
        .join(SourceLine, DeclRef.source_line_id == SourceLine.id)
        .join(FilePath, SourceLine.source_path_id == FilePath.id)
        .outerjoin(DirPath, FilePath.dirname_id == DirPath.id)
        .where(SymbolName.full_name == qualified_name)
        .order_by(DeclRef.id)
    )

    try:
        with db.session() as session:
            rows = session.exec(stmt).all()
    except SQLAlchemyError as e:
        raise StorageIOError.from_exception(e, f"lookup of {qualified_name}") from e

    results = [
        DeclInfo(
            declaration_id=declaration_id,
            path=join_source_path(dirname, pathname),
            line=lineno,
            column=colno,
            text=text,
            ref_kind=RefKind(ref_kind),
            kind=DeclKind(kind),
            is_definition=bool(is_definition),
            is_implicit=bool(is_implicit),
        )
        for (
            declaration_id,
            dirname,
            pathname,
            lineno,
            colno,
            text,
            ref_kind,
            kind,
            is_definition,
            is_implicit,
        ) in rows
    ]
    logger.debug("lookup_completed", name=qualified_name, results=len(results))
    return results
