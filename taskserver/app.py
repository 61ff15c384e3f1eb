import json
import logging
from functools import lru_cache
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .models import InputTask, Task, UpdateTask
from .store import JsonTaskStore, SqlTaskStore, TaskStore
from .utils import configure_logging, get_settings, next_task_id

logger = logging.getLogger(__name__)

app = FastAPI(title="Task Tracker", docs_url=None, redoc_url=None, openapi_url=None)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@lru_cache
def open_store(tasks_file: str, database_url: str | None) -> TaskStore:
    if database_url:
        return SqlTaskStore(database_url)
    return JsonTaskStore(tasks_file)


def get_store() -> TaskStore:
    settings = get_settings()
    return open_store(settings.tasks_file, settings.database_url)


async def get_body(request: Request) -> bytes:
    return await request.body()


def parse_json(body: bytes) -> dict:
    try:
        data = json.loads(body or b"{}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")
    return data if isinstance(data, dict) else {}


def find_task(tasks: list[Task], task_id: int) -> int:
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return index
    raise HTTPException(status_code=404, detail="Task not found")


@app.exception_handler(StarletteHTTPException)
async def plain_text_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
    # Unmatched methods are reported like unmatched paths
    if exc.status_code == 405:
        return PlainTextResponse("Not Found", status_code=404)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@app.get("/", response_class=HTMLResponse)
@app.get("/index.html", response_class=HTMLResponse)
def read_index() -> HTMLResponse:
    index_file = Path(get_settings().index_file)
    try:
        content = index_file.read_bytes()
    except OSError as e:
        logger.error("Could not read %s: %s", index_file, e)
        raise HTTPException(status_code=500, detail="Error loading index.html")
    return HTMLResponse(content)


@app.get("/tasks", status_code=200)
def get_tasks(store: TaskStore = Depends(get_store)) -> list[Task]:
    return store.load()


@app.post("/tasks", status_code=201)
def create_task(body: bytes = Depends(get_body), store: TaskStore = Depends(get_store)) -> Task:
    data = InputTask(**parse_json(body))
    if not data.title:
        raise HTTPException(status_code=400, detail="Task title is required")

    tasks = store.load()
    new_task = Task(id=next_task_id(tasks), title=data.title, completed=False)
    tasks.append(new_task)
    store.save(tasks)
    logger.info("Created task %d: %r", new_task.id, new_task.title)
    return new_task


@app.put("/tasks/{task_id:int}", status_code=200)
def update_task(
    task_id: int, body: bytes = Depends(get_body), store: TaskStore = Depends(get_store)
) -> Task:
    tasks = store.load()
    index = find_task(tasks, task_id)
    update = UpdateTask(**parse_json(body))
    if update.title is not None and not update.title:
        raise HTTPException(status_code=400, detail="Task title is required")

    tasks[index] = tasks[index].model_copy(update=update.model_dump(exclude_none=True))
    store.save(tasks)
    logger.info("Updated task %d", task_id)
    return tasks[index]


@app.delete("/tasks/{task_id:int}", status_code=204, response_class=Response)
def delete_task(task_id: int, store: TaskStore = Depends(get_store)) -> Response:
    tasks = store.load()
    index = find_task(tasks, task_id)
    del tasks[index]
    store.save(tasks)
    logger.info("Deleted task %d", task_id)
    return Response(status_code=204)


# Registered last so it only catches what no route above fully matched,
# including a known path requested with an unsupported method.
@app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
def not_found(path: str) -> Response:
    raise HTTPException(status_code=404, detail="Not Found")


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Todo List server is running at http://localhost:%d/", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
