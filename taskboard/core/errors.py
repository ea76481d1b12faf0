"""Domain errors shared by services and routers."""


class TaskNotFoundError(LookupError):
    """Raised when a task id does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class PersistenceError(RuntimeError):
    """A batch write could not be applied; nothing was written."""
