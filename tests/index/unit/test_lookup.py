"""Unit tests for declaration lookup (lookup.py)."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from cltags.index import DeclKind, IngestionSession, RefKind
from cltags.index._internal.db import Database
from cltags.index._internal.query import find_declaration, join_source_path


class TestJoinSourcePath:
    """Tests for join_source_path."""

    @pytest.mark.parametrize(
        ("dirname", "pathname", "expected"),
        [
            ("/src", "x.cpp", "/src/x.cpp"),
            ("/src/", "x.cpp", "/src/x.cpp"),
            ("/src", "sub/x.cpp", "/src/sub/x.cpp"),
            ("/src", "/other/x.cpp", "/other/x.cpp"),
            ("", "x.cpp", "x.cpp"),
            (None, "x.cpp", "x.cpp"),
        ],
    )
    def test_join(self, dirname: str | None, pathname: str, expected: str) -> None:
        assert join_source_path(dirname, pathname) == expected


class TestFindDeclaration:
    """Tests for find_declaration."""

    def test_definition_and_declaration(
        self, temp_db: Database, make_record: Callable[..., Any]
    ) -> None:
        with IngestionSession(temp_db) as session:
            session.record_occurrence(make_record())
            session.record_occurrence(
                make_record(
                    is_definition=False,
                    ref_kind=RefKind.DECLARATION,
                    file_path="/src/x.h",
                    line_number=2,
                    column_number=6,
                    line_text="void foo();",
                )
            )

        results = find_declaration(temp_db, "ns::foo")

        assert [info.format() for info in results] == [
            "/src/x.cpp:10:3:void foo() {}",
            "/src/x.h:2:6:void foo();",
        ]
        assert results[0].is_definition
        assert results[0].ref_kind is RefKind.DEFINITION
        assert results[0].kind is DeclKind.FUNCTION
        assert not results[1].is_definition
        assert results[1].ref_kind is RefKind.DECLARATION
        assert results[0].declaration_id != results[1].declaration_id

    def test_definition_then_use_at_same_position(
        self, temp_db: Database, make_record: Callable[..., Any]
    ) -> None:
        """Same file, line and column recorded as a definition and as a use."""
        with IngestionSession(temp_db) as session:
            session.record_occurrence(make_record())
        with IngestionSession(temp_db) as session:
            session.record_occurrence(make_record(ref_kind=RefKind.USE))

        results = find_declaration(temp_db, "ns::foo")

        assert len(results) == 2
        assert {info.path for info in results} == {"/src/x.cpp"}
        assert {info.line for info in results} == {10}
        assert {info.text for info in results} == {"void foo() {}"}
        assert [info.ref_kind for info in results] == [RefKind.DEFINITION, RefKind.USE]
        assert results[0].column == 3

    def test_unknown_name_is_empty(
        self, temp_db: Database, make_record: Callable[..., Any]
    ) -> None:
        with IngestionSession(temp_db) as session:
            session.record_occurrence(make_record())

        assert find_declaration(temp_db, "ns::bar") == []

    def test_matches_full_name_only(
        self, temp_db: Database, make_record: Callable[..., Any]
    ) -> None:
        with IngestionSession(temp_db) as session:
            session.record_occurrence(make_record())
            session.record_occurrence(make_record(full_name="other::foo", line_number=20))

        assert find_declaration(temp_db, "foo") == []
        assert [info.line for info in find_declaration(temp_db, "other::foo")] == [20]

    def test_uses_are_returned(self, temp_db: Database, make_record: Callable[..., Any]) -> None:
        with IngestionSession(temp_db) as session:
            session.record_occurrence(make_record())
            session.record_occurrence(
                make_record(
                    ref_kind=RefKind.USE,
                    file_path="/src/main.cpp",
                    line_number=5,
                    column_number=5,
                    line_text="    foo();",
                )
            )

        results = find_declaration(temp_db, "ns::foo")

        assert [info.ref_kind for info in results] == [RefKind.DEFINITION, RefKind.USE]
        assert results[1].format() == "/src/main.cpp:5:5:    foo();"

    def test_file_outside_dir_path(
        self, temp_db: Database, make_record: Callable[..., Any]
    ) -> None:
        with IngestionSession(temp_db) as session:
            session.record_occurrence(make_record(file_path="/usr/include/x.h", dir_path="/src"))

        assert [info.path for info in find_declaration(temp_db, "ns::foo")] == [
            "/usr/include/x.h"
        ]

    def test_lookup_is_stable(self, temp_db: Database, make_record: Callable[..., Any]) -> None:
        with IngestionSession(temp_db) as session:
            for line in (30, 10, 20):
                session.record_occurrence(make_record(line_number=line))

        first = find_declaration(temp_db, "ns::foo")
        second = find_declaration(temp_db, "ns::foo")

        assert first == second
        assert [info.line for info in first] == [30, 10, 20]
