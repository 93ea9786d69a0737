"""Agenda toolkit for teachers: in-memory tasks and routines, and a SQLite question bank."""

__version__ = "0.1.0"