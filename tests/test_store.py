import pytest

from taskserver.models import InputTask, Task, coerce_title, is_truthy, stringify
from taskserver.store import JsonTaskStore, SqlTaskStore
from taskserver.utils import get_settings, next_task_id

TASKS = [
    Task(id=3, title="Third created first"),
    Task(id=1, title="Sample Task 1", completed=True),
    Task(id=2, title="Sample Task 2"),
]


@pytest.fixture
def json_store(tmp_path):
    return JsonTaskStore(tmp_path / "tasks.json")


@pytest.fixture
def sql_store(tmp_path):
    return SqlTaskStore(f"sqlite:///{tmp_path / 'tasks.db'}")


# JSON store ----------------------------------------------------------------------------
def test_json_load_missing_file(json_store):
    assert json_store.load() == []


def test_json_load_malformed_file(json_store):
    json_store.path.write_text('[{"id": 1, "title": ', encoding="utf-8")
    assert json_store.load() == []


def test_json_load_wrong_shape(json_store):
    json_store.path.write_text('{"tasks": []}', encoding="utf-8")
    assert json_store.load() == []


def test_json_save_keeps_order(json_store):
    json_store.save(TASKS)
    assert json_store.load() == TASKS
    assert JsonTaskStore(json_store.path).load() == TASKS


def test_json_save_is_pretty_printed(json_store):
    json_store.save(TASKS[:1])
    assert json_store.path.read_text(encoding="utf-8").startswith('[\n  {\n    "id": 3,')


def test_json_save_overwrites(json_store):
    json_store.save(TASKS)
    json_store.save(TASKS[1:2])
    assert json_store.load() == [Task(id=1, title="Sample Task 1", completed=True)]


def test_json_save_leaves_no_temp_files(json_store):
    json_store.save(TASKS)
    assert [p.name for p in json_store.path.parent.iterdir()] == ["tasks.json"]


def test_json_save_creates_parent_dir(tmp_path):
    store = JsonTaskStore(tmp_path / "data" / "tasks.json")
    store.save(TASKS)
    assert store.load() == TASKS


# SQL store ----------------------------------------------------------------------------
def test_sql_load_empty(sql_store):
    assert sql_store.load() == []


def test_sql_save_keeps_order(sql_store, tmp_path):
    sql_store.save(TASKS)
    assert sql_store.load() == TASKS
    assert SqlTaskStore(f"sqlite:///{tmp_path / 'tasks.db'}").load() == TASKS


def test_sql_save_replaces_collection(sql_store):
    sql_store.save(TASKS)
    sql_store.save([Task(id=7, title="Only one")])
    assert sql_store.load() == [Task(id=7, title="Only one")]


# Helpers ----------------------------------------------------------------------------
def test_next_task_id_uses_clock():
    assert next_task_id([]) > 1_600_000_000_000


def test_next_task_id_stays_above_existing_ids():
    future_id = 10**15
    assert next_task_id([Task(id=future_id, title="From the future")]) == future_id + 1


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (False, ""),
        (0, ""),
        (0.0, ""),
        ("", ""),
        ("  hi  ", "hi"),
        (12, "12"),
        (True, "true"),
        (1.0, "1"),
        (2.5, "2.5"),
        ([], ""),
        ([" a", None, 2], "a,,2"),
        ({"a": 1}, "[object Object]"),
    ],
)
def test_coerce_title(value, expected):
    assert coerce_title(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(None, "null"), (False, "false"), ([[1, 2], 3], "1,2,3"), ({}, "[object Object]"), (1e21, "1e+21")],
)
def test_stringify(value, expected):
    assert stringify(value) == expected


@pytest.mark.parametrize("value, expected", [([], True), ({}, True), (0, False), ("", False), ("0", True)])
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected


def test_input_task_defaults_to_empty_title():
    assert InputTask().title == ""


def test_settings_defaults(monkeypatch):
    for name in ("PORT", "HOST", "TASKS_FILE", "TASKS_DATABASE_URL", "INDEX_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.port == 3000
    assert settings.tasks_file == "tasks.json"
    assert settings.database_url is None
    assert settings.index_file.endswith("index.html")


def test_settings_invalid_port(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-port")
    assert get_settings().port == 3000


def test_settings_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert get_settings().port == 8080
