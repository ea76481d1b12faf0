from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from taskboard.core.config import settings
from taskboard.core.database import get_db
from taskboard.schemas.task import DashboardResponse, TaskResponse, TaskStatus
from taskboard.services import task_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    status_filter: Optional[TaskStatus] = Query(None)
):
    # Compteurs par colonne + dernières tâches modifiées
    counts = task_service.status_counts(db)
    recent = task_service.recent_tasks(db, status_filter, settings.DASHBOARD_RECENT_LIMIT)
    filtered_total = counts[status_filter.value] if status_filter else sum(counts.values())

    return DashboardResponse(
        total=sum(counts.values()),
        completed=counts[TaskStatus.DONE.value],
        status_counts=counts,
        recent=[TaskResponse.model_validate(t) for t in recent],
        filtered_total=filtered_total
    )
