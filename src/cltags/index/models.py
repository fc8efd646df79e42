"""SQLModel definitions for the declaration index.

Single source of truth for all table schemas.

Architecture:
- Dimension tables: source_paths, source_lines, symbol_names, declarations.
  Each distinct natural key is stored once and reused by id.
- Fact table: decl_refs. One row per occurrence of a declaration identity at
  a source position.
- schema_info: singleton version row checked before any write.

Composite uniqueness indexes live in _internal/db/indexes.py.
"""

from enum import Enum

from sqlmodel import Field, SQLModel

# ============================================================================
# ENUMS
# ============================================================================


class DeclKind(str, Enum):
    """Declaration kind, as classified by the front end."""

    FUNCTION = "function"
    TYPE = "type"
    VARIABLE = "variable"
    ENUM = "enum"
    MACRO = "macro"
    NAMESPACE = "namespace"


class RefKind(str, Enum):
    """How an occurrence refers to its declaration."""

    DEFINITION = "definition"
    DECLARATION = "declaration"
    USE = "use"


# ============================================================================
# TABLE MODELS
# ============================================================================


class SourcePath(SQLModel, table=True):
    """File or directory path. Files point at their directory via dirname_id."""

    __tablename__ = "source_paths"

    id: int | None = Field(default=None, primary_key=True)
    dirname_id: int | None = Field(default=None, foreign_key="source_paths.id", index=True)
    pathname: str = Field(index=True)


class SourceLine(SQLModel, table=True):
    """One line of one file. Text is the first-seen content."""

    __tablename__ = "source_lines"

    id: int | None = Field(default=None, primary_key=True)
    source_path_id: int = Field(foreign_key="source_paths.id")
    lineno: int
    text: str


class SymbolName(SQLModel, table=True):
    """Identifier as written plus its fully qualified form."""

    __tablename__ = "symbol_names"

    id: int | None = Field(default=None, primary_key=True)
    short_name: str = Field(index=True)
    full_name: str = Field(index=True)


class Declaration(SQLModel, table=True):
    """Distinct declaration identity of a symbol.

    A forward declaration and a definition of the same symbol are separate
    rows, as are implicit and user-written variants.
    """

    __tablename__ = "declarations"

    id: int | None = Field(default=None, primary_key=True)
    symbol_name_id: int = Field(foreign_key="symbol_names.id", index=True)
    kind: str = Field(index=True)  # DeclKind value
    is_definition: bool
    is_implicit: bool


class DeclRef(SQLModel, table=True):
    """Occurrence of a declaration at a source position."""

    __tablename__ = "decl_refs"

    id: int | None = Field(default=None, primary_key=True)
    declaration_id: int = Field(foreign_key="declarations.id", index=True)
    ref_kind: str = Field(index=True)  # RefKind value
    source_line_id: int = Field(foreign_key="source_lines.id")
    colno: int
    is_implicit: bool
    # Enclosing reference; reserved, never populated by ingestion
    context_ref_id: int | None = Field(default=None, foreign_key="decl_refs.id")


class SchemaInfo(SQLModel, table=True):
    """Schema version (singleton row, id=1)."""

    __tablename__ = "schema_info"

    id: int = Field(default=1, primary_key=True)
    version: int


INDEX_TABLES = (SourcePath, SourceLine, SymbolName, Declaration, DeclRef, SchemaInfo)


# ============================================================================
# NON-TABLE MODELS (Pydantic only, for data transfer)
# ============================================================================


class OccurrenceRecord(SQLModel):
    """One sighting of a declaration, as reported by the front end."""

    short_name: str
    full_name: str
    kind: DeclKind
    is_definition: bool
    is_implicit: bool = False
    ref_kind: RefKind
    file_path: str
    dir_path: str | None = None  # Defaults to the dirname of file_path
    line_number: int
    column_number: int
    line_text: str


class DeclInfo(SQLModel):
    """Resolved occurrence returned by find_declaration."""

    declaration_id: int
    path: str
    line: int
    column: int
    text: str
    ref_kind: RefKind
    kind: DeclKind
    is_definition: bool
    is_implicit: bool

    def format(self) -> str:
        """Render as ``path:line:column:source_text``."""
        return f"{self.path}:{self.line}:{self.column}:{self.text}"
