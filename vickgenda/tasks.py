"""In-memory task management: create, list, edit, complete and remove tasks."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime

__all__ = ["TaskError", "TaskNotFoundError", "Task", "TaskStore"]

STATUS_PENDING = "Pendente"
STATUS_DONE = "Concluída"
DEFAULT_PRIORITY = 2

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


class TaskError(ValueError):
    """A task operation was rejected."""


class TaskNotFoundError(TaskError, LookupError):
    """No task exists with the requested ID."""


@dataclass(frozen=True)
class Task:
    """A single task. ``due_date`` is None when the task has no deadline."""

    id: str
    description: str
    due_date: date | None
    priority: int
    status: str
    tags: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


def _parse_date(text: str) -> date | None:
    """Parse a strict YYYY-MM-DD date, returning None when it is malformed."""
    if not _DATE_PATTERN.fullmatch(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def _split_tags(text: str) -> tuple[str, ...]:
    if not text.strip():
        return ()
    return tuple(tag.strip() for tag in text.split(","))


def _has_tag(task: Task, tag: str) -> bool:
    wanted = tag.casefold()
    return any(t.casefold() == wanted for t in task.tags)


def _matches(task: Task, status: str, priority: int, tag: str) -> bool:
    if status and task.status.casefold() != status.casefold():
        return False
    if priority > 0 and task.priority != priority:
        return False
    if tag and not _has_tag(task, tag):
        return False
    return True


class TaskStore:
    """Thread-safe in-memory store of tasks with sequential IDs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tasks: dict[str, Task] = {}
        self._next_id = 1

    def _new_id(self) -> str:
        task_id = f"task-{self._next_id}"
        self._next_id += 1
        return task_id

    def _lookup(self, task_id: str) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise TaskNotFoundError(
                f"tarefa com ID '{task_id}' não encontrada"
            ) from None

    def create(
        self,
        description: str,
        due_date: str | None = "",
        priority: int = 0,
        tags: str | None = "",
    ) -> Task:
        """Add a task. ``due_date`` is YYYY-MM-DD or empty; ``tags`` is comma separated."""
        with self._lock:
            if not description.strip():
                raise TaskError("a descrição da tarefa é obrigatória")
            due: date | None = None
            if due_date:
                due = _parse_date(due_date)
                if due is None:
                    raise TaskError(
                        "formato de data inválido para --prazo. Use YYYY-MM-DD"
                    )
            if priority <= 0:
                priority = DEFAULT_PRIORITY
            now = datetime.now()
            task = Task(
                id=self._new_id(),
                description=description,
                due_date=due,
                priority=priority,
                status=STATUS_PENDING,
                tags=_split_tags(tags or ""),
                created_at=now,
                updated_at=now,
            )
            self._tasks[task.id] = task
            return task

    def list(
        self,
        status: str = "",
        priority: int = 0,
        due_before: str = "",
        tag: str = "",
        sort_by: str = "",
        order: str = "",
    ) -> list[Task]:
        """Return tasks matching the filters, sorted.

        ``due_before`` keeps tasks due on or before that date (and tasks with
        no deadline). ``sort_by`` is one of descricao, prazo, prioridade,
        status; anything else sorts by creation time. ``order`` is asc or desc.
        """
        with self._lock:
            limit: date | None = None
            result = []
            for task in self._tasks.values():
                if not _matches(task, status, priority, tag):
                    continue
                if due_before:
                    if limit is None:
                        limit = _parse_date(due_before)
                        if limit is None:
                            raise TaskError(
                                "formato de data inválido para filtro de prazo"
                            )
                    if task.due_date is not None and task.due_date > limit:
                        continue
                result.append(task)

        descending = (order or "asc").lower() == "desc"
        key = (sort_by or "CreatedAt").lower()
        if key == "prazo":
            dated = sorted(
                (t for t in result if t.due_date is not None),
                key=lambda t: t.due_date,
                reverse=descending,
            )
            undated = [t for t in result if t.due_date is None]
            return dated + undated
        sort_keys = {
            "descricao": lambda t: t.description,
            "prioridade": lambda t: t.priority,
            "status": lambda t: t.status,
        }
        return sorted(
            result,
            key=sort_keys.get(key, lambda t: t.created_at),
            reverse=descending,
        )

    def edit(
        self,
        task_id: str,
        description: str = "",
        due_date: str = "",
        priority: int = 0,
        status: str = "",
        tags: str = "",
    ) -> Task:
        """Change the given fields of a task; empty values leave a field as is.

        A ``tags`` value of only blanks clears the tags.
        """
        with self._lock:
            task = self._lookup(task_id)
            changes: dict[str, object] = {}
            if description:
                changes["description"] = description
            if due_date:
                new_due = _parse_date(due_date)
                if new_due is None:
                    raise TaskError(
                        "formato de data inválido para novo prazo. Use YYYY-MM-DD"
                    )
                changes["due_date"] = new_due
            if priority > 0:
                changes["priority"] = priority
            if status:
                changes["status"] = status
            if tags:
                changes["tags"] = _split_tags(tags)
            if not changes:
                raise TaskError("nenhuma alteração especificada")
            updated = replace(task, updated_at=datetime.now(), **changes)
            self._tasks[task_id] = updated
            return updated

    def complete(self, task_id: str) -> Task:
        """Mark a task as done; raises TaskError if it already is."""
        with self._lock:
            task = self._lookup(task_id)
            if task.status == STATUS_DONE:
                raise TaskError("tarefa já está concluída")
            updated = replace(task, status=STATUS_DONE, updated_at=datetime.now())
            self._tasks[task_id] = updated
            return updated

    def remove(self, task_id: str) -> None:
        """Delete a task."""
        with self._lock:
            self._lookup(task_id)
            del self._tasks[task_id]

    def get(self, task_id: str) -> Task:
        """Return the task with the given ID."""
        with self._lock:
            return self._lookup(task_id)

    def clear(self) -> None:
        """Remove every task and restart ID numbering."""
        with self._lock:
            self._tasks.clear()
            self._next_id = 1

    def count(self, status: str = "", priority: int = 0, tag: str = "") -> int:
        """Count tasks matching the filters."""
        with self._lock:
            return sum(
                1 for task in self._tasks.values() if _matches(task, status, priority, tag)
            )