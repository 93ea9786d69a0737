# vickgenda

A small library for teachers who keep their agenda and question bank in one
place. It has these parts:

- **Tasks** (`vickgenda.tasks`): an in-memory task list with due dates,
  priorities (1 = high, 2 = medium, 3 = low), status and tags. You can filter,
  sort, edit, complete, remove and count tasks.
- **Routines** (`vickgenda.routines`): in-memory templates that generate tasks
  on demand. A template has a frequency (`diaria`, `semanal:<dias>`,
  `mensal:<dia>` or `manual`) and a task description that can use the
  `{nome_rotina}` and `{data}` placeholders.
- **Question bank** (`vickgenda.database`, `vickgenda.questions`,
  `vickgenda.question_search`): a SQLite database of exam questions. You can
  create, read, update and delete questions, and list them with filters,
  free-text search, sorting and pagination.
- **Contextual ids** (`vickgenda.ids`): short tokens such as `t1` that resolve
  to database identifiers.

## Installation

```
pip install .
```

Install the test extra with `pip install .[test]`.

## Tasks

```python
from vickgenda.tasks import TaskStore

tasks = TaskStore()
task = tasks.create("Corrigir provas", "2024-12-31", 1, "importante,provas")
tasks.complete(task.id)
pending = tasks.count("Pendente", 0, "")
by_due_date = tasks.list("", 0, "", "", "prazo", "asc")
```

New tasks get sequential ids (`task-1`, `task-2`, ...) and the status
`Pendente`. Completing a task sets the status to `Concluída`. Dates use the
`YYYY-MM-DD` format. A priority of zero or less falls back to 2.

`TaskStore.list` takes a status, a priority, a `due_before` date, a tag, a sort
column and an order. Status and tag are matched without regard to case. The
`due_before` filter keeps tasks due on or before that date, and also tasks with
no due date. The sort column can be `descricao`, `prazo`, `prioridade` or
`status`. Any other value sorts by creation time. When sorting by `prazo`,
tasks without a due date always come last.

`TaskStore.edit` changes only the fields you pass. If you pass a tags value made
only of blanks, the tags are cleared. `TaskStore.clear` empties the store and
restarts the id numbering.

Invalid input raises `TaskError`. An unknown id raises `TaskNotFoundError`,
which is both a `TaskError` and a `LookupError`.

## Routines

```python
from vickgenda.tasks import TaskStore
from vickgenda.routines import RoutineStore, is_valid_frequency

tasks = TaskStore()
routines = RoutineStore(tasks)
routine = routines.create(
    "Revisão semanal", "manual", "Revisar {nome_rotina} em {data}", 1, "trabalho", ""
)
generated = routines.generate_tasks(routine.id, "2024-03-15")
# generated[0].description == "Revisar Revisão semanal em 2024-03-15"
```

Routines get ids `routine-1`, `routine-2`, and so on. The next run time uses the
`YYYY-MM-DD HH:MM` format. For a non-manual routine it defaults to the current
time. Manual routines never have a next run time, and switching a routine to
`manual` clears it.

`RoutineStore.list` sorts by `nome` (the default), `frequencia` or
`proxima_execucao`. `generate_tasks` adds one task to the bound `TaskStore` and
returns it in a list. The base date defaults to today. It does not move the
routine's next run time forward.

Errors raise `RoutineError`. An unknown id raises `RoutineNotFoundError`.

## Question bank

```python
from vickgenda.database import Database
from vickgenda.questions import Question, QuestionRepository
from vickgenda.question_search import list_questions

with Database(":memory:") as db:
    repo = QuestionRepository(db)
    qid = repo.create(Question(subject="Math", question_text="2 + 2?",
                               correct_answers=["4"], question_type="short_answer"))
    question = repo.get(qid)
    questions, total = list_questions(
        db, {"search_query": "Math", "search_fields": ["subject"]}, "", "", 10, 1
    )
```

`Database` accepts a file path, `":memory:"` or a `file:` URI. `Database(None)`
opens `vickgenda.db` under the user's configuration directory and creates that
directory if needed. Call `default_database_path()` to see where the file is.
Opening a database creates every application table if it is missing.
`Database.table_names()` lists those tables. Failures to open the database
raise `DatabaseError`.

`QuestionRepository.create` generates a UUID when the question has no id, and
uses the current time when it has no creation time. It returns the id.
Timestamps read back are timezone-aware UTC values. List fields keep the
difference between `None` and an empty list.

`update` overwrites every field of a question. If the question has no creation
time, the stored one is kept. Missing ids raise `QuestionNotFoundError`. Other
failures raise `QuestionError`.

`list_questions` returns one page of questions and the total number of
matches. Filters accept `subject`, `topic`, `difficulty`, `question_type` and
`author`, which must match exactly, and `tags`, which matches a substring. A
search combines `search_query` with one or more `search_fields`, and any of
those fields may match. You can sort by `id`, `subject`, `topic`, `difficulty`,
`question_type`, `created_at`, `last_used_at` or `author`. With no sort column,
the newest questions come first. A limit or page of zero or less means 20 and
1. An unknown search field or sort column raises `QuestionError`.

## Contextual ids

```python
from vickgenda.ids import resolve, placeholder_examples

resolve("task", "t1").database_id   # "task-db-id-1"
```

Only the tokens `t1`, `p2` and `n3` are known. Any other token raises
`LookupError`.

## What this package does not do

- It has no command-line program. Everything is used as a Python library.
- Tasks and routines live in memory only. They are not saved to the database,
  even though the database creates `tasks` and `routines` tables.
- The database also creates tables for events, terms, students, lessons, grades,
  classes and subjects, but the package offers no operations on them. Only
  questions can be stored and read back.