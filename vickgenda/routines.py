"""Routine templates that generate tasks on demand."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from vickgenda.tasks import Task, TaskError, TaskStore

__all__ = [
    "RoutineError",
    "RoutineNotFoundError",
    "Routine",
    "RoutineStore",
    "is_valid_frequency",
]

DEFAULT_PRIORITY = 2
FREQUENCY_MANUAL = "manual"

_DATETIME_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


class RoutineError(ValueError):
    """A routine operation was rejected."""


class RoutineNotFoundError(RoutineError, LookupError):
    """No routine exists with the requested ID."""


@dataclass(frozen=True)
class Routine:
    """A routine template. ``next_run_time`` is None for manual routines."""

    id: str
    name: str
    frequency: str
    task_description: str
    task_priority: int
    task_tags: tuple[str, ...] = ()
    next_run_time: datetime | None = None
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


def is_valid_frequency(frequency: str) -> bool:
    """Check a frequency such as 'diaria', 'semanal:seg,qua', 'mensal:15' or 'manual'."""
    lowered = frequency.lower()
    if lowered in ("diaria", FREQUENCY_MANUAL):
        return True
    parts = lowered.split(":")
    if len(parts) == 2:
        kind, value = parts
        return kind in ("semanal", "mensal") and len(value) > 0
    return False


def _is_manual(frequency: str) -> bool:
    return frequency.lower() == FREQUENCY_MANUAL


def _parse_datetime(text: str) -> datetime | None:
    """Parse a strict 'YYYY-MM-DD HH:MM', returning None when malformed."""
    if not _DATETIME_PATTERN.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d %H:%M")
    except ValueError:
        return None


def _parse_date(text: str) -> date:
    if not _DATE_PATTERN.fullmatch(text):
        raise ValueError(f"cannot parse {text!r} as YYYY-MM-DD")
    return date.fromisoformat(text)


def _split_tags(text: str) -> tuple[str, ...]:
    if not text.strip():
        return ()
    return tuple(tag.strip() for tag in text.split(","))


class RoutineStore:
    """Thread-safe in-memory store of routine templates bound to a task store."""

    def __init__(self, tasks: TaskStore) -> None:
        self._lock = threading.Lock()
        self._routines: dict[str, Routine] = {}
        self._next_id = 1
        self.tasks = tasks

    def _new_id(self) -> str:
        routine_id = f"routine-{self._next_id}"
        self._next_id += 1
        return routine_id

    def _lookup(self, routine_id: str) -> Routine:
        try:
            return self._routines[routine_id]
        except KeyError:
            raise RoutineNotFoundError(
                f"modelo de rotina com ID '{routine_id}' não encontrado"
            ) from None

    def create(
        self,
        name: str,
        frequency: str,
        task_description: str,
        task_priority: int = 0,
        task_tags: str = "",
        next_run: str = "",
    ) -> Routine:
        """Add a routine template.

        ``next_run`` is 'YYYY-MM-DD HH:MM'; for non-manual routines it defaults
        to now. Manual routines have no next run time.
        """
        with self._lock:
            if not name.strip():
                raise RoutineError("o nome do modelo de rotina é obrigatório")
            if not is_valid_frequency(frequency):
                raise RoutineError(
                    "formato de frequência inválido. Exemplos: 'diaria', "
                    "'semanal:seg,qua', 'mensal:1', 'manual'"
                )
            if not task_description.strip():
                raise RoutineError("a descrição modelo para tarefas é obrigatória")

            next_run_time: datetime | None = None
            if not _is_manual(frequency):
                if not next_run:
                    next_run_time = datetime.now()
                else:
                    next_run_time = _parse_datetime(next_run)
                    if next_run_time is None:
                        raise RoutineError(
                            "formato de data/hora inválido para próxima execução. "
                            "Use YYYY-MM-DD HH:MM"
                        )

            if task_priority <= 0:
                task_priority = DEFAULT_PRIORITY

            now = datetime.now()
            routine = Routine(
                id=self._new_id(),
                name=name,
                frequency=frequency,
                task_description=task_description,
                task_priority=task_priority,
                task_tags=_split_tags(task_tags),
                next_run_time=next_run_time,
                created_at=now,
                updated_at=now,
            )
            self._routines[routine.id] = routine
            return routine

    def list(self, sort_by: str = "", order: str = "") -> list[Routine]:
        """Return all routines sorted by nome (default), frequencia or proxima_execucao.

        Routines without a next run time always come last when sorting by
        proxima_execucao.
        """
        with self._lock:
            routines = list(self._routines.values())

        descending = (order or "asc").lower() == "desc"
        key = (sort_by or "nome").lower()
        if key == "proxima_execucao":
            scheduled = sorted(
                (r for r in routines if r.next_run_time is not None),
                key=lambda r: r.next_run_time,
                reverse=descending,
            )
            unscheduled = [r for r in routines if r.next_run_time is None]
            return scheduled + unscheduled
        if key == "frequencia":
            return sorted(routines, key=lambda r: r.frequency, reverse=descending)
        return sorted(routines, key=lambda r: r.name, reverse=descending)

    def edit(
        self,
        routine_id: str,
        name: str = "",
        frequency: str = "",
        task_description: str = "",
        task_priority: int = 0,
        task_tags: str = "",
        next_run: str = "",
    ) -> Routine:
        """Change the given fields of a routine; empty values leave a field as is.

        Switching to 'manual' clears the next run time; a ``task_tags`` value of
        only blanks clears the tags.
        """
        with self._lock:
            routine = self._lookup(routine_id)
            changes: dict[str, object] = {}
            current_frequency = routine.frequency
            next_run_time = routine.next_run_time

            if name:
                changes["name"] = name
            if frequency:
                if not is_valid_frequency(frequency):
                    raise RoutineError("formato de frequência inválido")
                changes["frequency"] = frequency
                current_frequency = frequency
                if _is_manual(frequency):
                    next_run_time = None
                elif next_run_time is None and not next_run:
                    next_run_time = datetime.now()
            if task_description:
                changes["task_description"] = task_description
            if task_priority > 0:
                changes["task_priority"] = task_priority
            if task_tags:
                changes["task_tags"] = _split_tags(task_tags)

            if next_run:
                if _is_manual(current_frequency):
                    raise RoutineError(
                        "não é possível definir próxima execução para rotina manual"
                    )
                parsed = _parse_datetime(next_run)
                if parsed is None:
                    raise RoutineError(
                        "formato de data/hora inválido para próxima execução"
                    )
                next_run_time = parsed
                changes["next_run_time"] = next_run_time
            elif _is_manual(current_frequency) and next_run_time is not None:
                next_run_time = None
                changes["next_run_time"] = None

            if not changes:
                raise RoutineError("nenhuma alteração especificada")

            changes["next_run_time"] = next_run_time
            updated = replace(routine, updated_at=datetime.now(), **changes)
            self._routines[routine_id] = updated
            return updated

    def remove(self, routine_id: str) -> None:
        """Delete a routine."""
        with self._lock:
            self._lookup(routine_id)
            del self._routines[routine_id]

    def get(self, routine_id: str) -> Routine:
        """Return the routine with the given ID."""
        with self._lock:
            return self._lookup(routine_id)

    def clear(self) -> None:
        """Remove every routine and restart ID numbering."""
        with self._lock:
            self._routines.clear()
            self._next_id = 1

    def generate_tasks(self, routine_id: str, base_date: str = "") -> list[Task]:
        """Create tasks from a routine, filling {data} and {nome_rotina}.

        ``base_date`` is YYYY-MM-DD and defaults to today.
        """
        with self._lock:
            routine = self._lookup(routine_id)

        if base_date:
            try:
                day = _parse_date(base_date)
            except ValueError as exc:
                raise RoutineError(
                    f"formato de data inválido para data base: {exc}"
                ) from exc
        else:
            day = date.today()

        description = routine.task_description.replace("{data}", day.isoformat())
        description = description.replace("{nome_rotina}", routine.name)

        try:
            task = self.tasks.create(
                description, "", routine.task_priority, ",".join(routine.task_tags)
            )
        except TaskError as exc:
            raise RoutineError(
                f"falha ao gerar tarefa a partir do modelo '{routine_id}': {exc}"
            ) from exc
        return [task]