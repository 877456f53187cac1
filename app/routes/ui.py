from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from ..dependencies import get_board
from ..models import Priority
from ..presentation import TaskBoard
from ..views import render_board

router = APIRouter(tags=["ui"])


def _back_to_board() -> RedirectResponse:
    return RedirectResponse("/", status_code=303)


@router.get("/", response_class=HTMLResponse)
async def show_board(board: TaskBoard = Depends(get_board)):
    """Render the task list, refetched from the database"""
    await board.refresh()
    return HTMLResponse(render_board(board))


@router.post("/ui/tasks")
async def add_task(
    title: str = Form(""),
    priority: Priority = Form(Priority.LOW),
    board: TaskBoard = Depends(get_board),
):
    await board.add(title, priority)
    return _back_to_board()


@router.post("/ui/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, board: TaskBoard = Depends(get_board)):
    await board.toggle(task_id)
    return _back_to_board()


@router.post("/ui/tasks/{task_id}/delete")
async def delete_task(task_id: str, board: TaskBoard = Depends(get_board)):
    await board.delete(task_id)
    return _back_to_board()


@router.post("/ui/tasks/{task_id}/suggest")
async def suggest_for_task(task_id: str, board: TaskBoard = Depends(get_board)):
    await board.request_suggestion(task_id)
    return _back_to_board()


@router.post("/ui/suggestion/dismiss")
async def dismiss_suggestion(board: TaskBoard = Depends(get_board)):
    board.dismiss_suggestion()
    return _back_to_board()
