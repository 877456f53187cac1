from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..crud import TaskRepository
from ..dependencies import get_repository
from ..schemas import TaskCreate, TaskResponse, TaskStatusUpdate, TaskTitleUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskResponse])
async def list_tasks(repo: TaskRepository = Depends(get_repository)):
    """Get all tasks, newest first"""
    tasks = await repo.list()
    return [TaskResponse.model_validate(task) for task in tasks]


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    repo: TaskRepository = Depends(get_repository)
):
    """Create a new task"""
    db_task = await repo.create(task.title, task.priority)
    return TaskResponse.model_validate(db_task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def set_task_completed(
    task_id: str,
    update: TaskStatusUpdate,
    repo: TaskRepository = Depends(get_repository)
):
    """Mark a task as completed or not"""
    db_task = await repo.set_completed(task_id, update.completed)
    return TaskResponse.model_validate(db_task)


@router.put("/{task_id}/title", response_model=TaskResponse)
async def update_task_title(
    task_id: str,
    update: TaskTitleUpdate,
    repo: TaskRepository = Depends(get_repository)
):
    """Rename a task"""
    db_task = await repo.update_title(task_id, update.title)
    return TaskResponse.model_validate(db_task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    repo: TaskRepository = Depends(get_repository)
):
    """Delete a specific task"""
    await repo.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
