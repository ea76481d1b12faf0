"""
Store en mémoire du tableau avec mises à jour optimistes.

A move is applied to the local list first, then sent to the persistence
service as one all-or-nothing batch. If the batch fails the store goes back
to the snapshot taken before the move and the error is re-raised so the
caller can retry or report it.
"""

import logging
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from taskboard.core.errors import TaskNotFoundError
from taskboard.schemas.task import BatchUpdateItem, TaskRecord, TaskStatus
from taskboard.services import ordering_service

logger = logging.getLogger(__name__)

Snapshot = Tuple[TaskRecord, ...]


class TaskPersistence(Protocol):
    """Service distant qui applique un lot de {id, status, order} atomiquement"""

    def batch_update(self, updates: Sequence[BatchUpdateItem]) -> List[TaskRecord]:
        ...


class BoardStore:
    def __init__(
        self,
        tasks: Iterable[TaskRecord] = (),
        persistence: Optional[TaskPersistence] = None,
        epsilon: float = ordering_service.DEFAULT_EPSILON,
    ):
        self._tasks: List[TaskRecord] = list(tasks)
        self.persistence = persistence
        self.epsilon = epsilon

    # ============ LECTURE ============

    @property
    def tasks(self) -> Snapshot:
        return tuple(self._tasks)

    def get_task(self, task_id: str) -> TaskRecord:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def get_group_tasks(self, status: TaskStatus) -> List[TaskRecord]:
        return ordering_service.group_of(self._tasks, status)

    # ============ ÉCRITURE LOCALE ============

    def add_task(self, task: TaskRecord) -> None:
        self._tasks.insert(0, task)

    def remove_task(self, task_id: str) -> None:
        self.get_task(task_id)
        self._tasks = [t for t in self._tasks if t.id != task_id]

    def replace_task(self, task_id: str, updated: TaskRecord) -> None:
        self.get_task(task_id)
        self._tasks = [updated if t.id == task_id else t for t in self._tasks]

    def snapshot(self) -> Snapshot:
        return tuple(self._tasks)

    def revert(self, snapshot: Snapshot) -> None:
        self._tasks = list(snapshot)

    def _apply_updates(self, updates: Sequence[BatchUpdateItem]) -> None:
        for item in updates:
            task = self.get_task(item.id)
            moved = ordering_service.transition_status(task, item.status)
            self.replace_task(item.id, moved.model_copy(update={"order": item.order}))

    def _reconcile(self, records: Iterable[TaskRecord]) -> None:
        # les valeurs retournées par le serveur font foi
        for record in records:
            self.replace_task(record.id, record)

    def _commit(self, updates: List[BatchUpdateItem]) -> None:
        before = self.snapshot()
        self._apply_updates(updates)
        if self.persistence is None:
            return
        try:
            saved = self.persistence.batch_update(updates)
        except Exception:
            logger.warning(f"Persisting {len(updates)} update(s) failed, reverting")
            self.revert(before)
            raise
        self._reconcile(saved)

    # ============ OPÉRATIONS ============

    def move(self, task_id: str, destination_group: TaskStatus, destination_index: Optional[int]) -> TaskRecord:
        """Déplace une tâche (drag & drop) et retourne sa nouvelle version."""
        plan = ordering_service.plan_move(
            task_id, destination_group, destination_index, self._tasks, self.epsilon
        )
        self._commit(plan.updates)
        return self.get_task(task_id)

    def normalize(self, status: TaskStatus) -> List[Tuple[str, float]]:
        status = TaskStatus(status)
        orders = ordering_service.normalize_group(self.get_group_tasks(status))
        updates = [BatchUpdateItem(id=task_id, status=status, order=order) for task_id, order in orders]
        self._commit(updates)
        return orders
