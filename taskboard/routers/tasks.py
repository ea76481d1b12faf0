import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from taskboard.core.database import get_db
from taskboard.core.errors import PersistenceError, TaskNotFoundError
from taskboard.models.task import Task
from taskboard.schemas.task import (
    BatchUpdateRequest,
    BatchUpdateResponse,
    TaskCreate,
    TaskMoveRequest,
    TaskPriority,
    TaskResponse,
    TaskStatus,
    TaskUpdate,
)
from taskboard.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


def get_task_or_404(task_id: str, db: Session = Depends(get_db)) -> Task:
    try:
        return task_service.get_task(db, task_id)
    except TaskNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(task_data: TaskCreate, db: Session = Depends(get_db)):
    return task_service.create_task(db, task_data)


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    db: Session = Depends(get_db),
    status_filter: Optional[TaskStatus] = Query(None),
    priority_filter: Optional[TaskPriority] = Query(None),
    completed: Optional[bool] = Query(None),
    sort: str = Query("order", pattern="^(order|priority|updated)$")
):
    return task_service.list_tasks(db, status_filter, priority_filter, completed, sort)


@router.put("/batch-update", response_model=BatchUpdateResponse)
def batch_update(request: BatchUpdateRequest, db: Session = Depends(get_db)):
    """Met à jour status/order de plusieurs tâches en une transaction (fin de drag & drop)"""
    try:
        tasks = task_service.batch_update(db, request.todos)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task not found: {e.task_id}")
    except PersistenceError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Batch update failed")

    return BatchUpdateResponse(
        message=f"{len(tasks)} task(s) updated",
        todos=[TaskResponse.model_validate(t) for t in tasks]
    )


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task: Task = Depends(get_task_or_404)):
    return task


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_data: TaskUpdate,
    task: Task = Depends(get_task_or_404),
    db: Session = Depends(get_db)
):
    return task_service.update_task(db, task, task_data)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task: Task = Depends(get_task_or_404), db: Session = Depends(get_db)):
    task_service.delete_task(db, task)


@router.post("/{task_id}/status", response_model=TaskResponse)
def update_status(
    new_status: str = Query(...),
    task: Task = Depends(get_task_or_404),
    db: Session = Depends(get_db)
):
    valid_statuses = [s.value for s in TaskStatus]

    if new_status not in valid_statuses:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    # même colonne : la position ne change pas
    if task.status == new_status:
        return task

    return _move(db, task.id, TaskStatus(new_status), None)


@router.post("/{task_id}/toggle", response_model=TaskResponse)
def toggle_complete(task: Task = Depends(get_task_or_404), db: Session = Depends(get_db)):
    return task_service.toggle_task(db, task)


@router.post("/{task_id}/move", response_model=TaskResponse)
def move_task(task_id: str, move: TaskMoveRequest, db: Session = Depends(get_db)):
    """Déplace une tâche vers une colonne à une position donnée (index clampé)"""
    return _move(db, task_id, move.status, move.index)


def _move(db: Session, task_id: str, new_status: TaskStatus, index: Optional[int]) -> Task:
    try:
        task, _ = task_service.move_task(db, task_id, new_status, index)
    except TaskNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except PersistenceError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Move failed")
    logger.info(f"Task {task_id} moved to {task.status} (order={task.order})")
    return task
