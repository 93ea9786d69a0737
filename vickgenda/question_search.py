"""Filtered, searched, sorted and paginated listing of stored questions."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

from vickgenda.database import Database
from vickgenda.questions import (
    SELECT_COLUMNS,
    Question,
    QuestionError,
    question_from_row,
)

__all__ = ["list_questions"]

_log = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_PAGE = 1

_EQUALITY_FILTERS = frozenset({"subject", "topic", "difficulty", "question_type", "author"})
_SEARCH_KEYS = frozenset({"search_query", "search_fields"})
_SEARCHABLE_FIELDS = frozenset(
    {
        "id",
        "subject",
        "topic",
        "question_text",
        "source",
        "tags",
        "author",
        "difficulty",
        "question_type",
    }
)
_SORTABLE_FIELDS = frozenset(
    {
        "id",
        "subject",
        "topic",
        "difficulty",
        "question_type",
        "created_at",
        "last_used_at",
        "author",
    }
)
_JSON_COLUMNS = (
    ("answer_options", "AnswerOptions"),
    ("correct_answers", "CorrectAnswers"),
    ("tags", "Tags"),
)


def _filter_clauses(filters: Mapping[str, Any]) -> tuple[list[str], list[Any]]:
    clauses: list[str] = []
    args: list[Any] = []
    for key, value in filters.items():
        if key in _SEARCH_KEYS or not isinstance(value, str) or not value:
            continue
        if key in _EQUALITY_FILTERS:
            clauses.append(f"{key} = ?")
            args.append(value)
        elif key == "tags":
            clauses.append("tags LIKE ?")
            args.append(f"%{value}%")
    return clauses, args


def _search_clause(filters: Mapping[str, Any]) -> tuple[str | None, list[Any]]:
    query = filters.get("search_query")
    fields = filters.get("search_fields")
    if not isinstance(query, str) or not query:
        return None, []
    if not isinstance(fields, Sequence) or isinstance(fields, str) or not fields:
        return None, []
    pattern = f"%{query}%"
    conditions = []
    for field_name in fields:
        name = str(field_name).lower()
        if name not in _SEARCHABLE_FIELDS:
            raise QuestionError(f"invalid search_field provided: {field_name}")
        conditions.append(f"{name} LIKE ?")
    return "(" + " OR ".join(conditions) + ")", [pattern] * len(conditions)


def _order_clause(sort_by: str, order: str) -> str:
    if not sort_by:
        return " ORDER BY created_at DESC"
    column = sort_by.lower()
    if column not in _SORTABLE_FIELDS:
        raise QuestionError(f"invalid sort_by column: {sort_by}")
    direction = "DESC" if (order or "").upper() == "DESC" else "ASC"
    return f" ORDER BY {column} {direction}"


def _tolerant_question(row: sqlite3.Row) -> Question:
    """Build a question, dropping list columns whose JSON cannot be decoded."""
    values = dict(row)
    for column, label in _JSON_COLUMNS:
        raw = values[column]
        if raw is None:
            continue
        try:
            json.loads(raw)
        except json.JSONDecodeError as exc:
            _log.warning(
                "failed to unmarshal %s for question ID %s: %s", label, values["id"], exc
            )
            values[column] = None
    return question_from_row(values)


def list_questions(
    database: Database,
    filters: Mapping[str, Any] | None = None,
    sort_by: str = "",
    order: str = "",
    limit: int = 0,
    page: int = 0,
) -> tuple[list[Question], int]:
    """Return one page of matching questions and the total number of matches.

    ``filters`` may hold subject, topic, difficulty, question_type and author
    (exact match), tags (substring of the stored tag list), and search_query
    with search_fields (substring match on any of the listed fields). Without
    ``sort_by`` the newest questions come first. A ``limit`` or ``page`` of
    zero or less means 20 and 1.
    """
    filters = filters or {}
    clauses, args = _filter_clauses(filters)
    search, search_args = _search_clause(filters)
    if search is not None:
        clauses.append(search)
        args.extend(search_args)
    where = " WHERE " + " AND ".join(clauses) if clauses else ""
    order_by = _order_clause(sort_by, order)

    if limit <= 0:
        limit = DEFAULT_LIMIT
    if page <= 0:
        page = DEFAULT_PAGE
    offset = (page - 1) * limit

    connection = database.connection
    try:
        (total,) = connection.execute(
            f"SELECT COUNT(*) FROM questions{where}", args
        ).fetchone()
    except sqlite3.Error as exc:
        raise QuestionError(f"failed to count questions: {exc}") from exc
    if total == 0:
        return [], 0

    try:
        rows = connection.execute(
            f"SELECT {SELECT_COLUMNS} FROM questions{where}{order_by} LIMIT ? OFFSET ?",
            [*args, limit, offset],
        ).fetchall()
    except sqlite3.Error as exc:
        raise QuestionError(f"failed to list questions: {exc}") from exc
    return [_tolerant_question(row) for row in rows], total