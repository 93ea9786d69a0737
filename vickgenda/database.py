"""SQLite storage: opening the database file and creating its schema."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from platformdirs import user_config_path

__all__ = ["DatabaseError", "Database", "default_database_path"]

_log = logging.getLogger(__name__)

APP_NAME = "vickgenda"
DATABASE_FILE = "vickgenda.db"

_TABLES: tuple[tuple[str, str], ...] = (
    (
        "questions",
        """
        CREATE TABLE IF NOT EXISTS questions (
            id TEXT PRIMARY KEY,
            subject TEXT NOT NULL,
            topic TEXT NOT NULL,
            difficulty TEXT NOT NULL,
            question_text TEXT NOT NULL,
            answer_options TEXT,
            correct_answers TEXT NOT NULL,
            question_type TEXT NOT NULL,
            source TEXT,
            tags TEXT,
            created_at TIMESTAMP NOT NULL,
            last_used_at TIMESTAMP,
            author TEXT
        )""",
    ),
    (
        "tasks",
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            description TEXT NOT NULL,
            due_date TIMESTAMP,
            priority INTEGER,
            status TEXT,
            tags TEXT,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "events",
        """
        CREATE TABLE IF NOT EXISTS events (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            start_time TIMESTAMP NOT NULL,
            end_time TIMESTAMP NOT NULL,
            location TEXT,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "routines",
        """
        CREATE TABLE IF NOT EXISTS routines (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            frequency TEXT,
            task_description TEXT,
            task_priority INTEGER,
            task_tags TEXT,
            next_run_time TIMESTAMP,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "terms",
        """
        CREATE TABLE IF NOT EXISTS terms (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            academic_year TEXT,
            start_date TIMESTAMP,
            end_date TIMESTAMP,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "students",
        """
        CREATE TABLE IF NOT EXISTS students (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            class_id TEXT,
            email TEXT,
            date_of_birth TIMESTAMP,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "lessons",
        """
        CREATE TABLE IF NOT EXISTS lessons (
            id TEXT PRIMARY KEY,
            subject TEXT,
            topic TEXT,
            date TIMESTAMP,
            class_id TEXT,
            plan TEXT,
            observations TEXT,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "grades",
        """
        CREATE TABLE IF NOT EXISTS grades (
            id TEXT PRIMARY KEY,
            student_id TEXT,
            term_id TEXT,
            subject TEXT,
            description TEXT,
            value REAL,
            weight REAL,
            date TIMESTAMP,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "classes",
        """
        CREATE TABLE IF NOT EXISTS classes (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            level TEXT,
            academic_year TEXT,
            term_ids TEXT,
            subject_ids TEXT,
            student_ids TEXT,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
    (
        "subjects",
        """
        CREATE TABLE IF NOT EXISTS subjects (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            teacher_ids TEXT,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        )""",
    ),
)


class DatabaseError(Exception):
    """The database could not be opened or prepared."""


def default_database_path() -> Path:
    """Return the database file in the user's configuration directory."""
    return user_config_path(APP_NAME, appauthor=False) / DATABASE_FILE


class Database:
    """An open SQLite database with every application table created.

    ``path`` may be a file path, ``":memory:"`` or a ``file:`` URI; when it is
    None or empty the default location is used and its directory created.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        if not path:
            resolved = default_database_path()
            try:
                resolved.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise DatabaseError(
                    f"failed to create database directory {resolved.parent}: {exc}"
                ) from exc
            target = str(resolved)
        else:
            target = str(path)

        self.path = target
        _log.info("Using database at: %s", target)

        try:
            self.connection = sqlite3.connect(
                target,
                uri=target.startswith("file:"),
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise DatabaseError(f"failed to open database at {target}: {exc}") from exc
        self.connection.row_factory = sqlite3.Row

        try:
            self.connection.execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            self.connection.close()
            raise DatabaseError(f"failed to ping database at {target}: {exc}") from exc

        try:
            self._create_tables()
        except DatabaseError:
            self.connection.close()
            raise

    def _create_tables(self) -> None:
        for name, statement in _TABLES:
            try:
                self.connection.execute(statement)
            except sqlite3.Error as exc:
                raise DatabaseError(f"failed to create {name} table: {exc}") from exc

    def close(self) -> None:
        """Close the connection."""
        self.connection.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def table_names(self) -> list[str]:
        """Return the names of the tables in the database, sorted."""
        rows = self.connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
        ).fetchall()
        return [row[0] for row in rows]