"""Task service"""

import logging
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from taskboard.core.config import settings
from taskboard.core.errors import PersistenceError, TaskNotFoundError
from taskboard.models.task import Task
from taskboard.schemas.task import (
    PRIORITY_RANK,
    BatchUpdateItem,
    TaskCreate,
    TaskPriority,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
)
from taskboard.services import ordering_service

logger = logging.getLogger(__name__)


def to_record(task: Task) -> TaskRecord:
    return TaskRecord.model_validate(task)


def _records(tasks: Sequence[Task]) -> List[TaskRecord]:
    return [to_record(t) for t in tasks]


def get_task(db: Session, task_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise TaskNotFoundError(task_id)
    return task


def list_tasks(
    db: Session,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    completed: Optional[bool] = None,
    sort: str = "order",
) -> List[Task]:
    query = db.query(Task)

    if status is not None:
        query = query.filter(Task.status == TaskStatus(status).value)
    if priority is not None:
        query = query.filter(Task.priority == TaskPriority(priority).value)
    if completed is not None:
        query = query.filter(Task.completed == completed)

    if sort == "updated":
        return query.order_by(Task.updated_at.desc()).all()

    tasks = query.all()
    if sort == "priority":
        return sorted(tasks, key=lambda t: (PRIORITY_RANK[TaskPriority(t.priority)], t.created_at or datetime.min))

    # tri par colonne puis par position dans la colonne
    by_id = {t.id: t for t in tasks}
    columns = list(TaskStatus)
    ordered = ordering_service.sort_group(_records(tasks))
    ordered.sort(key=lambda r: columns.index(r.status))
    return [by_id[r.id] for r in ordered]


def get_group(db: Session, status: TaskStatus) -> List[Task]:
    """Tâches d'une colonne dans l'ordre affiché"""
    tasks = db.query(Task).filter(Task.status == TaskStatus(status).value).all()
    by_id = {t.id: t for t in tasks}
    return [by_id[r.id] for r in ordering_service.sort_group(_records(tasks))]


def get_board(db: Session) -> Dict[TaskStatus, List[Task]]:
    return {status: get_group(db, status) for status in TaskStatus}


def create_task(db: Session, data: TaskCreate) -> Task:
    status = TaskStatus(data.status)
    if data.completed and status != TaskStatus.DONE:
        status = TaskStatus.DONE

    order = data.order
    if order is None:
        order = ordering_service.next_order(_records(get_group(db, status)))

    new_task = Task(
        title=data.title,
        description=data.description,
        priority=TaskPriority(data.priority).value,
        status=status.value,
        order=order,
        completed=status == TaskStatus.DONE,
    )
    db.add(new_task)
    db.commit()
    db.refresh(new_task)
    return new_task


def _set_status(db: Session, task: Task, record: TaskRecord, keep_order: bool = False) -> None:
    # changement de colonne : la tâche passe en fin de sa nouvelle colonne
    if record.status.value != task.status and not keep_order:
        task.order = ordering_service.next_order(_records(get_group(db, record.status)))
    task.status = record.status.value
    task.completed = record.completed


def update_task(db: Session, task: Task, data: TaskUpdate) -> Task:
    update_data = data.model_dump(exclude_unset=True)
    status = update_data.pop("status", None)
    completed = update_data.pop("completed", None)

    for field, value in update_data.items():
        if field == "priority" and value is not None:
            value = TaskPriority(value).value
        setattr(task, field, value)

    # status et completed restent synchronisés, status prioritaire
    record = to_record(task)
    if status is not None:
        record = ordering_service.transition_status(record, status)
    elif completed is not None and completed != record.completed:
        record = ordering_service.toggle_completed(record)
    _set_status(db, task, record, keep_order="order" in update_data)

    db.commit()
    db.refresh(task)
    return task


def toggle_task(db: Session, task: Task) -> Task:
    record = ordering_service.toggle_completed(to_record(task))
    _set_status(db, task, record)
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task: Task) -> None:
    # pas de renumérotation des voisines
    db.delete(task)
    db.commit()


def batch_update(db: Session, updates: Sequence[BatchUpdateItem]) -> List[Task]:
    """
    Applique plusieurs {id, status, order} en une seule transaction.

    Tout ou rien : un id inconnu ou une erreur SQL annule l'ensemble.
    """
    ids = [u.id for u in updates]
    found = {t.id: t for t in db.query(Task).filter(Task.id.in_(ids)).all()} if ids else {}

    missing = [task_id for task_id in ids if task_id not in found]
    if missing:
        raise TaskNotFoundError(missing[0])

    try:
        for item in updates:
            task = found[item.id]
            status = TaskStatus(item.status)
            task.status = status.value
            task.completed = status == TaskStatus.DONE
            if "order" in item.model_fields_set:
                task.order = item.order
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Batch update failed: {e}")
        raise PersistenceError("batch update failed") from e

    for task in found.values():
        db.refresh(task)
    return [found[task_id] for task_id in ids]


def move_task(db: Session, task_id: str, status: TaskStatus, index: Optional[int]) -> Tuple[Task, bool]:
    """Déplace une tâche; retourne (tâche, colonne renumérotée ?)"""
    get_task(db, task_id)
    plan = ordering_service.plan_move(
        task_id, status, index, _records(db.query(Task).all()), settings.ORDER_EPSILON
    )
    if plan.normalized:
        logger.info(f"Column {plan.task.status.value} renumbered after moving {task_id}")
    batch_update(db, plan.updates)
    return get_task(db, task_id), plan.normalized


def normalize_status_group(db: Session, status: TaskStatus) -> List[Tuple[str, float]]:
    status = TaskStatus(status)
    orders = ordering_service.normalize_group(_records(get_group(db, status)))
    batch_update(db, [BatchUpdateItem(id=task_id, status=status, order=order) for task_id, order in orders])
    logger.info(f"Column {status.value} normalized ({len(orders)} tasks)")
    return orders


class SqlTaskPersistence:
    """Persistance SQLAlchemy utilisée par BoardStore"""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> List[TaskRecord]:
        return _records(self.db.query(Task).all())

    def batch_update(self, updates: Sequence[BatchUpdateItem]) -> List[TaskRecord]:
        return _records(batch_update(self.db, updates))


# ============ DASHBOARD ============

def status_counts(db: Session) -> Dict[str, int]:
    counts = {status.value: 0 for status in TaskStatus}
    rows = db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
    for task_status, count in rows:
        counts[task_status] = count
    return counts


def recent_tasks(db: Session, status: Optional[TaskStatus] = None, limit: int = 5) -> List[Task]:
    query = db.query(Task)
    if status is not None:
        query = query.filter(Task.status == TaskStatus(status).value)
    return query.order_by(Task.updated_at.desc()).limit(limit).all()
