from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


def is_truthy(value: Any) -> bool:
    # Empty lists and objects count as truthy, unlike Python
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if item is None else stringify(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def coerce_title(value: Any) -> str:
    if not is_truthy(value):
        return ""
    return stringify(value).strip()


# ---------- Database Models ----------
class TaskDB(Base):
    __tablename__ = "task"

    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"Task(id: {self.id}, title: '{self.title}', completed: {self.completed})"

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "completed": self.completed}


# ---------- Data Models ----------
class Task(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    completed: bool = False


class InputTask(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str:
        return coerce_title(value)


class UpdateTask(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    completed: bool | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str | None:
        if value is None:
            return None
        return stringify(value).strip()

    @field_validator("completed", mode="before")
    @classmethod
    def _coerce_completed(cls, value: Any) -> bool | None:
        if value is None:
            return None
        return is_truthy(value)
