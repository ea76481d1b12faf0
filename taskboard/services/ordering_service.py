"""
Moteur d'ordonnancement du tableau Kanban.

Each status column is an independent ordering group. A task's position inside
its group is given by a real-valued ``order`` key; moving a task only computes
a new key for that task (midpoint between its new neighbours) and leaves the
siblings untouched. When repeated insertions squeeze two neighbouring keys
closer than ``epsilon``, the whole destination group is renumbered 0..n-1.

Toutes les fonctions sont pures : elles ne modifient jamais leurs entrées et
retournent de nouveaux TaskRecord.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from taskboard.core.errors import TaskNotFoundError
from taskboard.schemas.task import (
    PRIORITY_RANK,
    BatchUpdateItem,
    TaskPriority,
    TaskRecord,
    TaskStatus,
)

DEFAULT_EPSILON = 1e-6


class MovePlan(BaseModel):
    """Résultat d'un déplacement : la tâche déplacée + les écritures à persister"""

    task: TaskRecord
    updates: List[BatchUpdateItem]
    normalized: bool = False

    model_config = ConfigDict(frozen=True)


# ============ TRI ============

def _sort_key(task: TaskRecord):
    # order croissant, null en dernier, puis priorité, puis date de création
    has_order = task.order is not None
    return (
        0 if has_order else 1,
        task.order if has_order else 0.0,
        PRIORITY_RANK[TaskPriority(task.priority)],
        task.created_at or datetime.min,
    )


def sort_group(tasks: Iterable[TaskRecord]) -> List[TaskRecord]:
    """Séquence visible d'une colonne."""
    return sorted(tasks, key=_sort_key)


def group_of(tasks: Iterable[TaskRecord], status: TaskStatus, exclude_id: Optional[str] = None) -> List[TaskRecord]:
    """Tâches d'une colonne, triées, sans la tâche ``exclude_id``."""
    status = TaskStatus(status)
    return sort_group(t for t in tasks if t.status == status and t.id != exclude_id)


def _numbered_keys(tasks: Sequence[TaskRecord]) -> List[float]:
    return [t.order for t in sort_group(tasks) if t.order is not None]


def _clamp(index: Optional[int], upper: int) -> int:
    if index is None:
        return upper
    return max(0, min(index, upper))


# ============ CALCUL DES CLÉS ============

def compute_order(group: Sequence[TaskRecord], index: Optional[int]) -> float:
    """
    Clé d'ordre pour insérer une tâche à ``index`` dans ``group``.

    ``group`` must not contain the task being moved. The index is clamped to
    the group bounds; ``None`` means the end of the group. Tasks without a
    key always sort last, so an index inside that tail lands right after the
    last numbered task.
    """
    keys = _numbered_keys(group)
    if not keys:
        return 0.0

    index = _clamp(index, len(keys))
    if index == 0:
        return keys[0] - 1
    if index == len(keys):
        return keys[-1] + 1
    return (keys[index - 1] + keys[index]) / 2


def next_order(group: Sequence[TaskRecord]) -> float:
    """Clé d'une tâche créée en fin de colonne : max + 1, ou 0 si vide."""
    keys = _numbered_keys(group)
    return max(keys) + 1 if keys else 0.0


def needs_normalization(group: Sequence[TaskRecord], epsilon: float = DEFAULT_EPSILON) -> bool:
    """True si deux clés voisines sont plus proches que ``epsilon``."""
    keys = _numbered_keys(group)
    return any(b - a < epsilon for a, b in zip(keys, keys[1:]))


def _renumber(sequence: Sequence[TaskRecord]) -> List[Tuple[str, float]]:
    return [(task.id, float(position)) for position, task in enumerate(sequence)]


def normalize_group(tasks: Sequence[TaskRecord]) -> List[Tuple[str, float]]:
    """
    Renumérote une colonne en 0, 1, 2, ... en gardant la séquence actuelle.

    Retourne la liste (id, order) dans l'ordre de la colonne.
    """
    return _renumber(sort_group(tasks))


# ============ STATUTS ============

def transition_status(task: TaskRecord, status: TaskStatus) -> TaskRecord:
    """Any column can be reached from any other; done and completed move together."""
    status = TaskStatus(status)
    return task.model_copy(update={
        "status": status,
        "completed": status == TaskStatus.DONE,
    })


def toggle_completed(task: TaskRecord) -> TaskRecord:
    # Décocher une tâche terminée la renvoie dans "todo"
    completed = not task.completed
    if completed:
        status = TaskStatus.DONE
    elif task.status == TaskStatus.DONE:
        status = TaskStatus.TODO
    else:
        status = task.status
    return task.model_copy(update={"status": status, "completed": completed})


# ============ DÉPLACEMENTS ============

def apply_move(
    task: TaskRecord,
    destination_group: TaskStatus,
    destination_index: Optional[int],
    all_tasks: Iterable[TaskRecord],
) -> TaskRecord:
    """Nouvelle version de ``task`` placée à ``destination_index`` dans la colonne."""
    destination_group = TaskStatus(destination_group)
    siblings = group_of(all_tasks, destination_group, exclude_id=task.id)
    moved = transition_status(task, destination_group)
    return moved.model_copy(update={"order": compute_order(siblings, destination_index)})


def plan_move(
    task_id: str,
    destination_group: TaskStatus,
    destination_index: Optional[int],
    all_tasks: Sequence[TaskRecord],
    epsilon: float = DEFAULT_EPSILON,
) -> MovePlan:
    """
    Compute every write a move needs.

    In the common case only the moved task changes. If the new key leaves the
    destination column with two keys closer than ``epsilon`` the column is
    renumbered, and the plan carries one update per task of that column.
    """
    task = next((t for t in all_tasks if t.id == task_id), None)
    if task is None:
        raise TaskNotFoundError(task_id)

    destination_group = TaskStatus(destination_group)
    moved = apply_move(task, destination_group, destination_index, all_tasks)
    siblings = group_of(all_tasks, destination_group, exclude_id=task_id)

    if not needs_normalization(siblings + [moved], epsilon):
        update = BatchUpdateItem(id=moved.id, status=moved.status, order=moved.order)
        return MovePlan(task=moved, updates=[update])

    sequence = list(siblings)
    numbered = len([t for t in siblings if t.order is not None])
    sequence.insert(_clamp(destination_index, numbered), moved)
    orders = _renumber(sequence)
    moved = moved.model_copy(update={"order": dict(orders)[moved.id]})
    updates = [
        BatchUpdateItem(id=sibling_id, status=destination_group, order=order)
        for sibling_id, order in orders
    ]
    return MovePlan(task=moved, updates=updates, normalized=True)
