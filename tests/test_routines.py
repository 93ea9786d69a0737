from datetime import date, datetime, timedelta

import pytest

from vickgenda.routines import (
    RoutineError,
    RoutineNotFoundError,
    RoutineStore,
    is_valid_frequency,
)
from vickgenda.tasks import TaskStore

LAYOUT = "%Y-%m-%d %H:%M"


@pytest.fixture
def tasks():
    return TaskStore()


@pytest.fixture
def store(tasks):
    return RoutineStore(tasks)


@pytest.mark.parametrize(
    "frequency, expected",
    [
        ("diaria", True),
        ("DIARIA", True),
        ("manual", True),
        ("semanal:seg,qua,sex", True),
        ("mensal:15", True),
        ("anual", False),
        ("semanal:", False),
        ("mensal:1:2", False),
        ("outro:1", False),
    ],
)
def test_is_valid_frequency(frequency, expected):
    assert is_valid_frequency(frequency) is expected


def test_create_manual(store):
    routine = store.create(
        "Rotina Manual Teste",
        "manual",
        "Tarefa gerada por rotina manual {nome_rotina}",
        1,
        "manual,teste",
        "",
    )
    assert routine.name == "Rotina Manual Teste"
    assert routine.frequency == "manual"
    assert routine.next_run_time is None
    assert routine.task_tags == ("manual", "teste")
    assert routine.id == "routine-1"


def test_create_daily_with_next_run(store):
    next_run = (datetime.now() + timedelta(hours=24)).strftime(LAYOUT)
    routine = store.create("Rotina Diária Teste", "diaria", "Tarefa diária", 2, "", next_run)
    assert routine.frequency == "diaria"
    assert routine.next_run_time == datetime.strptime(next_run, LAYOUT)


def test_create_daily_without_next_run_defaults_to_now(store):
    routine = store.create("Rotina Diária Default", "diaria", "Tarefa diária default", 2, "", "")
    assert routine.next_run_time is not None
    assert abs(datetime.now() - routine.next_run_time) < timedelta(seconds=5)


def test_create_default_priority(store):
    routine = store.create("R", "manual", "Desc", 0, "", "")
    assert routine.task_priority == 2


def test_create_name_required(store):
    with pytest.raises(RoutineError, match="nome do modelo de rotina é obrigatório"):
        store.create("", "manual", "Desc", 1, "", "")


def test_create_invalid_frequency(store):
    with pytest.raises(RoutineError, match="formato de frequência inválido"):
        store.create("Nome", "anual", "Desc", 1, "", "")


def test_create_task_description_required(store):
    with pytest.raises(RoutineError, match="descrição modelo para tarefas é obrigatória"):
        store.create("Nome Valido", "manual", "", 1, "", "")


def test_create_invalid_next_run(store):
    with pytest.raises(
        RoutineError, match="formato de data/hora inválido para próxima execução"
    ):
        store.create("Nome", "diaria", "Desc", 1, "", "data invalida")


def test_list_all_and_sort_by_name(store):
    r1 = store.create("Rotina ZZZ", "manual", "Desc Z", 1, "", "")
    r2 = store.create("Rotina AAA", "diaria", "Desc A", 2, "", datetime.now().strftime(LAYOUT))
    assert len(store.list("", "")) == 2
    assert [r.id for r in store.list("nome", "asc")] == [r2.id, r1.id]
    assert [r.id for r in store.list("nome", "desc")] == [r1.id, r2.id]


def test_list_sort_by_next_run_puts_manual_last(store):
    manual = store.create("M", "manual", "D", 1, "", "")
    late = store.create("L", "diaria", "D", 1, "", "2024-05-02 10:00")
    early = store.create("E", "diaria", "D", 1, "", "2024-05-01 10:00")
    assert [r.id for r in store.list("proxima_execucao", "asc")] == [
        early.id,
        late.id,
        manual.id,
    ]
    assert [r.id for r in store.list("proxima_execucao", "desc")] == [
        late.id,
        early.id,
        manual.id,
    ]


def test_list_sort_by_frequency(store):
    a = store.create("A", "semanal:seg", "D", 1, "", "")
    b = store.create("B", "diaria", "D", 1, "", "")
    c = store.create("C", "manual", "D", 1, "", "")
    assert [r.id for r in store.list("frequencia", "asc")] == [b.id, c.id, a.id]


def test_edit_success(store):
    original = store.create("Original", "manual", "Desc Orig", 1, "tag1", "")
    next_run = (datetime.now() + timedelta(minutes=5)).strftime(LAYOUT)
    edited = store.edit(original.id, "Nome Editado", "diaria", "", 0, "", next_run)
    assert edited.name == "Nome Editado"
    assert edited.frequency == "diaria"
    assert edited.next_run_time == datetime.strptime(next_run, LAYOUT)
    assert store.get(original.id) == edited


def test_edit_to_manual_clears_next_run(store):
    routine = store.create("Com Tempo", "diaria", "Desc", 1, "", datetime.now().strftime(LAYOUT))
    edited = store.edit(routine.id, "", "manual", "", 0, "", "")
    assert edited.next_run_time is None


def test_edit_to_automatic_without_next_run_defaults_to_now(store):
    routine = store.create("Manual", "manual", "Desc", 1, "", "")
    edited = store.edit(routine.id, frequency="diaria")
    assert edited.next_run_time is not None
    assert abs(datetime.now() - edited.next_run_time) < timedelta(seconds=5)


def test_edit_tags_blank_clears(store):
    routine = store.create("R", "manual", "D", 1, "a,b", "")
    edited = store.edit(routine.id, task_tags="  ")
    assert edited.task_tags == ()


def test_edit_not_found(store):
    with pytest.raises(RoutineNotFoundError, match="não encontrado"):
        store.edit("id-inexistente", "Novo Nome", "", "", 0, "", "")


def test_edit_no_changes(store):
    routine = store.create("R", "manual", "D", 1, "", "")
    with pytest.raises(RoutineError, match="nenhuma alteração especificada"):
        store.edit(routine.id)


def test_edit_invalid_frequency(store):
    routine = store.create("R", "manual", "D", 1, "", "")
    with pytest.raises(RoutineError, match="formato de frequência inválido"):
        store.edit(routine.id, frequency="anual")
    assert store.get(routine.id).frequency == "manual"


def test_edit_next_run_on_manual_rejected(store):
    routine = store.create("R", "manual", "D", 1, "", "")
    with pytest.raises(RoutineError, match="rotina manual"):
        store.edit(routine.id, next_run="2024-05-01 10:00")


def test_remove(store):
    routine = store.create("Para Remover", "manual", "Desc", 1, "", "")
    store.remove(routine.id)
    with pytest.raises(RoutineNotFoundError):
        store.get(routine.id)


def test_remove_missing(store):
    with pytest.raises(RoutineNotFoundError):
        store.remove("routine-99")


def test_clear_resets_ids(store):
    store.create("A", "manual", "D", 1, "", "")
    store.clear()
    assert store.list() == []
    assert store.create("B", "manual", "D", 1, "", "").id == "routine-1"


def test_generate_tasks(store, tasks):
    routine = store.create(
        "Rotina Geradora", "manual", "Tarefa de {nome_rotina} para {data}", 1, "gerada,auto", ""
    )
    generated = store.generate_tasks(routine.id, "2024-03-15")
    assert len(generated) == 1
    task = generated[0]
    assert task.description == "Tarefa de Rotina Geradora para 2024-03-15"
    assert task.priority == 1
    assert task.tags == ("gerada", "auto")
    assert tasks.get(task.id) == task


def test_generate_tasks_not_found(store):
    with pytest.raises(RoutineNotFoundError, match="não encontrado"):
        store.generate_tasks("id-inexistente", "2024-03-15")


def test_generate_tasks_invalid_base_date(store):
    routine = store.create("R", "manual", "D {data}", 1, "", "")
    with pytest.raises(RoutineError, match="formato de data inválido para data base"):
        store.generate_tasks(routine.id, "15/03/2024")


def test_manual_routine_task_generation_flow(store, tasks):
    routine = store.create(
        "Minha Rotina Diária", "manual", "Revisar {nome_rotina} em {data}", 1, "trabalho", ""
    )
    today = date.today().isoformat()
    generated = store.generate_tasks(routine.id, today)
    assert len(generated) == 1
    assert generated[0].description == f"Revisar Minha Rotina Diária em {today}"
    all_tasks = tasks.list("", 0, "", "", "", "")
    assert [t.id for t in all_tasks] == [generated[0].id]


def test_generate_tasks_defaults_to_today(store):
    routine = store.create("R", "manual", "Dia {data}", 1, "", "")
    task = store.generate_tasks(routine.id)[0]
    assert task.description == f"Dia {date.today().isoformat()}"