"""
Router du tableau Kanban (colonnes ordonnées, renumérotation)
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from taskboard.core.database import get_db
from taskboard.core.errors import PersistenceError
from taskboard.schemas.task import (
    BoardColumn,
    BoardResponse,
    NormalizeResponse,
    TaskResponse,
    TaskStatus,
)
from taskboard.services import task_service

router = APIRouter(prefix="/board", tags=["board"])


@router.get("", response_model=BoardResponse)
def get_board(db: Session = Depends(get_db)):
    """Les quatre colonnes, chacune dans l'ordre affiché"""
    board = task_service.get_board(db)
    return BoardResponse(columns=[
        BoardColumn(status=column, tasks=[TaskResponse.model_validate(t) for t in tasks])
        for column, tasks in board.items()
    ])


@router.post("/{column}/normalize", response_model=NormalizeResponse)
def normalize_column(column: TaskStatus, db: Session = Depends(get_db)):
    """Renumérote une colonne en 0..n-1 sans changer la séquence"""
    try:
        orders = task_service.normalize_status_group(db, column)
    except PersistenceError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Normalization failed")
    return NormalizeResponse(status=column, orders=orders)
