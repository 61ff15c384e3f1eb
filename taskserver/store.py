import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .models import Base, Task, TaskDB

logger = logging.getLogger(__name__)

task_list = TypeAdapter(list[Task])


# No lock spans a load/save pair; concurrent mutations race and the later save wins.
class TaskStore(ABC):
    @abstractmethod
    def load(self) -> list[Task]:
        ...

    @abstractmethod
    def save(self, tasks: list[Task]) -> None:
        ...


class JsonTaskStore(TaskStore):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonTaskStore(path: '{self.path}')"

    def load(self) -> list[Task]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Could not read %s, using an empty task list: %s", self.path, e)
            return []
        try:
            return task_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Could not parse %s, using an empty task list (%d errors)", self.path, e.error_count()
            )
            return []

    def save(self, tasks: list[Task]) -> None:
        data = task_list.dump_json(tasks, indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write a sibling temp file and rename it so readers never see a half-written file
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class SqlTaskStore(TaskStore):
    def __init__(self, url: str) -> None:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.url = url
        self.engine = create_engine(url, connect_args=connect_args)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        Base.metadata.create_all(bind=self.engine)

    def __repr__(self) -> str:
        return f"SqlTaskStore(url: '{self.url}')"

    def load(self) -> list[Task]:
        try:
            with self.session_factory() as db:
                rows = db.query(TaskDB).order_by(TaskDB.position).all()
                return [Task(**row.to_dict()) for row in rows]
        except SQLAlchemyError as e:
            logger.warning("Could not read tasks from %s, using an empty task list: %s", self.url, e)
            return []

    def save(self, tasks: list[Task]) -> None:
        with self.session_factory() as db:
            db.query(TaskDB).delete()
            db.add_all(
                TaskDB(position=position, id=task.id, title=task.title, completed=task.completed)
                for position, task in enumerate(tasks)
            )
            db.commit()
