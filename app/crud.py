import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select

from .db import Database
from .errors import NotFoundError, StorageError, ValidationError
from .models import Priority, Task

logger = logging.getLogger(__name__)

# Drivers such as asyncpg let connection failures through as OSError
STORAGE_ERRORS = (SQLAlchemyError, OSError)


def clean_title(title: str) -> str:
    """Trim a title, rejecting blank ones"""
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    return title


class TaskRepository:
    """CRUD over the tasks table. Every call opens its own session."""

    def __init__(self, db: Database):
        self.db = db

    async def list(self) -> List[Task]:
        """Get all tasks, newest first (ties by id). Storage errors yield an empty list."""
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(Task).order_by(Task.created_at.desc(), Task.id.desc())
                )
                return list(result.scalars().all())
        except STORAGE_ERRORS as e:
            logger.error("Failed to fetch tasks: %s", e)
            return []

    async def create(self, title: str, priority: Priority = Priority.LOW) -> Task:
        """Create a new task"""
        title = clean_title(title)
        db_task = Task(title=title, priority=Priority(priority).value, completed=False)
        try:
            async with self.db.session() as session:
                session.add(db_task)
                await session.commit()
                await session.refresh(db_task)
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to create task: {e}") from e
        logger.debug("Created task %s", db_task.id)
        return db_task

    async def set_completed(self, task_id: str, completed: bool) -> Task:
        """Set the completed flag of a task"""
        return await self._update(task_id, completed=completed)

    async def update_title(self, task_id: str, title: str) -> Task:
        """Replace the title of a task"""
        return await self._update(task_id, title=clean_title(title))

    async def delete(self, task_id: str) -> None:
        """Delete a task"""
        try:
            async with self.db.session() as session:
                db_task = await session.get(Task, task_id)
                if db_task is None:
                    raise NotFoundError(task_id)
                await session.delete(db_task)
                await session.commit()
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to delete task: {e}") from e
        logger.debug("Deleted task %s", task_id)

    async def _update(self, task_id: str, **fields) -> Task:
        try:
            async with self.db.session() as session:
                db_task = await session.get(Task, task_id)
                if db_task is None:
                    raise NotFoundError(task_id)
                for field, value in fields.items():
                    setattr(db_task, field, value)
                await session.commit()
                await session.refresh(db_task)
                return db_task
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to update task: {e}") from e
