"""Question bank storage: create, read, update and delete questions in SQLite."""

from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from vickgenda.database import Database

__all__ = [
    "QuestionError",
    "QuestionNotFoundError",
    "Question",
    "QuestionRepository",
    "question_from_row",
]

COLUMNS = (
    "id",
    "subject",
    "topic",
    "difficulty",
    "question_text",
    "answer_options",
    "correct_answers",
    "question_type",
    "source",
    "tags",
    "created_at",
    "last_used_at",
    "author",
)

SELECT_COLUMNS = ", ".join(COLUMNS)


class QuestionError(Exception):
    """A question operation failed or was rejected."""


class QuestionNotFoundError(QuestionError, LookupError):
    """No question exists with the requested ID."""


@dataclass
class Question:
    """A question in the bank.

    List fields keep the difference between None (never set) and an empty
    list. Timestamps read back from storage are timezone-aware UTC values.
    """

    id: str = ""
    subject: str = ""
    topic: str = ""
    difficulty: str = ""
    question_text: str = ""
    answer_options: list[str] | None = None
    correct_answers: list[str] | None = None
    question_type: str = ""
    source: str = ""
    tags: list[str] | None = None
    created_at: datetime | None = None
    last_used_at: datetime | None = None
    author: str = ""


def format_timestamp(moment: datetime | None) -> str | None:
    """Render a datetime as a fixed-width UTC string that sorts chronologically.

    Naive datetimes are taken to be in local time.
    """
    if moment is None:
        return None
    return moment.astimezone(timezone.utc).isoformat(sep=" ", timespec="microseconds")


def parse_timestamp(text: str | None) -> datetime | None:
    """Read back a stored timestamp as an aware UTC datetime."""
    if text is None:
        return None
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _load_list(raw: str | None, field_name: str, question_id: str) -> list[str] | None:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise QuestionError(
            f"failed to unmarshal {field_name} for question ID {question_id}: {exc}"
        ) from exc


def question_from_row(row: Mapping[str, Any]) -> Question:
    """Build a Question from a database row with the questions columns.

    Raises QuestionError when a JSON list column cannot be decoded.
    """
    question_id = row["id"]
    try:
        created_at = parse_timestamp(row["created_at"])
        last_used_at = parse_timestamp(row["last_used_at"])
    except ValueError as exc:
        raise QuestionError(
            f"failed to read timestamps for question ID {question_id}: {exc}"
        ) from exc
    return Question(
        id=question_id,
        subject=row["subject"] or "",
        topic=row["topic"] or "",
        difficulty=row["difficulty"] or "",
        question_text=row["question_text"] or "",
        answer_options=_load_list(row["answer_options"], "AnswerOptions", question_id),
        correct_answers=_load_list(
            row["correct_answers"], "CorrectAnswers", question_id
        ),
        question_type=row["question_type"] or "",
        source=row["source"] or "",
        tags=_load_list(row["tags"], "Tags", question_id),
        created_at=created_at,
        last_used_at=last_used_at,
        author=row["author"] or "",
    )


class QuestionRepository:
    """Persistence of questions in the ``questions`` table of a Database."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @property
    def _connection(self) -> sqlite3.Connection:
        return self.database.connection

    def create(self, question: Question) -> str:
        """Insert a question and return its ID.

        A new UUID is used when the question has no ID, and the current time
        when it has no creation time. The given object is left unchanged.
        """
        stored = replace(
            question,
            id=question.id or str(uuid.uuid4()),
            created_at=question.created_at or datetime.now(timezone.utc),
        )
        try:
            self._connection.execute(
                f"INSERT INTO questions ({SELECT_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    stored.id,
                    stored.subject,
                    stored.topic,
                    stored.difficulty,
                    stored.question_text,
                    json.dumps(stored.answer_options),
                    json.dumps(stored.correct_answers),
                    stored.question_type,
                    stored.source,
                    json.dumps(stored.tags),
                    format_timestamp(stored.created_at),
                    format_timestamp(stored.last_used_at),
                    stored.author,
                ),
            )
        except sqlite3.Error as exc:
            raise QuestionError(
                f"failed to execute insert statement for question: {exc}"
            ) from exc
        return stored.id

    def get(self, question_id: str) -> Question:
        """Return the question with the given ID."""
        try:
            row = self._connection.execute(
                f"SELECT {SELECT_COLUMNS} FROM questions WHERE id = ?",
                (question_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise QuestionError(f"failed to scan question row: {exc}") from exc
        if row is None:
            raise QuestionNotFoundError(f"question with ID {question_id} not found")
        return question_from_row(row)

    def update(self, question: Question) -> None:
        """Overwrite every field of an existing question.

        A question without a creation time keeps the stored one.
        """
        if not question.id:
            raise QuestionError("cannot update question without ID")
        try:
            cursor = self._connection.execute(
                """
                UPDATE questions SET
                    subject = ?, topic = ?, difficulty = ?, question_text = ?,
                    answer_options = ?, correct_answers = ?, question_type = ?,
                    source = ?, tags = ?, created_at = COALESCE(?, created_at),
                    last_used_at = ?, author = ?
                WHERE id = ?
                """,
                (
                    question.subject,
                    question.topic,
                    question.difficulty,
                    question.question_text,
                    json.dumps(question.answer_options),
                    json.dumps(question.correct_answers),
                    question.question_type,
                    question.source,
                    json.dumps(question.tags),
                    format_timestamp(question.created_at),
                    format_timestamp(question.last_used_at),
                    question.author,
                    question.id,
                ),
            )
        except sqlite3.Error as exc:
            raise QuestionError(
                f"failed to execute update statement for question ID {question.id}: {exc}"
            ) from exc
        if cursor.rowcount == 0:
            raise QuestionNotFoundError(
                f"no question found with ID {question.id} to update"
            )

    def delete(self, question_id: str) -> None:
        """Remove the question with the given ID."""
        if not question_id:
            raise QuestionError("cannot delete question without ID: ID cannot be empty")
        try:
            cursor = self._connection.execute(
                "DELETE FROM questions WHERE id = ?", (question_id,)
            )
        except sqlite3.Error as exc:
            raise QuestionError(
                f"erro ao executar a remoção da questão {question_id}: {exc}"
            ) from exc
        if cursor.rowcount == 0:
            raise QuestionNotFoundError(f"question with ID {question_id} not found")