from fastapi import Request

from .crud import TaskRepository
from .presentation import TaskBoard
from .suggestions import SuggestionService


def get_repository(request: Request) -> TaskRepository:
    """Dependency to get a repository bound to the process-wide database"""
    return TaskRepository(request.app.state.database)


def get_suggestion_service(request: Request) -> SuggestionService:
    return request.app.state.suggestion_service


def get_board(request: Request) -> TaskBoard:
    return request.app.state.board
