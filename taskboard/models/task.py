"""Task model"""

from sqlalchemy import Column, String, DateTime, Boolean, Float
from datetime import datetime
import uuid
from taskboard.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, index=True, default=_new_id)

    title = Column(String(100), nullable=False)
    description = Column(String, nullable=True)
    priority = Column(String, default="medium")
    status = Column(String, default="todo", index=True)
    order = Column(Float, nullable=True)  # position dans la colonne, null = en fin de colonne
    completed = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
