"""Owner-scoped task operations.

Every lookup goes through ``(id, owner_id)`` together, so a task owned by
somebody else is reported exactly like one that doesn't exist.
"""

import logging
from typing import List, Optional

from errors import NotFoundError, ValidationError
from models import Task, TaskStatus, User
from schemas import TaskFilter

logger = logging.getLogger(__name__)


def _task_not_found(task_id: int) -> NotFoundError:
    return NotFoundError(f'Task with ID "{task_id}" not found')


def parse_status(value) -> TaskStatus:
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError(f'"{value}" is an invalid status') from None


class TaskService:
    def __init__(self, tasks):
        self.tasks = tasks

    def list(self, filters: Optional[TaskFilter], owner: User) -> List[Task]:
        if filters is None:
            filters = TaskFilter()
        return self.tasks.search(owner.id, status=filters.status, term=filters.search)

    def get_by_id(self, task_id: int, owner: User) -> Task:
        task = self.tasks.find_one(id=task_id, owner_id=owner.id)
        if task is None:
            raise _task_not_found(task_id)
        return task

    def create(self, title: str, description: str, owner: User) -> Task:
        task = self.tasks.create(
            title=title,
            description=description,
            status=TaskStatus.OPEN,
            owner_id=owner.id,
        )
        logger.info("User %s created task %s", owner.username, task.id)
        return task

    def update_status(self, task_id: int, status, owner: User) -> Task:
        # Any of the three states may follow any other
        status = parse_status(status)
        task = self.get_by_id(task_id, owner)
        task.status = status
        task = self.tasks.save(task)
        logger.info("User %s moved task %s to %s", owner.username, task.id, status.value)
        return task

    def delete(self, task_id: int, owner: User) -> None:
        affected = self.tasks.delete(id=task_id, owner_id=owner.id)
        if affected == 0:
            raise _task_not_found(task_id)
        logger.info("User %s deleted task %s", owner.username, task_id)
