import logging
import os
import time
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel

from .models import Task

load_dotenv(find_dotenv(usecwd=True))

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_INDEX_FILE = Path(__file__).parent / "static" / "index.html"


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    tasks_file: str = "tasks.json"
    database_url: str | None = None
    index_file: str = str(DEFAULT_INDEX_FILE)
    log_level: str = "INFO"


def _read_port() -> int:
    raw = os.getenv("PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid PORT value %r, using %d", raw, DEFAULT_PORT)
        return DEFAULT_PORT


def get_settings() -> Settings:
    # Read at call time, nothing is cached
    return Settings(
        host=os.getenv("HOST") or "0.0.0.0",
        port=_read_port(),
        tasks_file=os.getenv("TASKS_FILE") or "tasks.json",
        database_url=os.getenv("TASKS_DATABASE_URL") or None,
        index_file=os.getenv("INDEX_FILE") or str(DEFAULT_INDEX_FILE),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def next_task_id(tasks: list[Task]) -> int:
    now = int(time.time() * 1000)
    return max([now] + [task.id + 1 for task in tasks])
