from fastapi import APIRouter, Depends

from ..dependencies import get_suggestion_service
from ..schemas import Suggestion, SuggestionRequest
from ..suggestions import SuggestionService

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.post("", response_model=Suggestion, response_model_by_alias=True)
async def suggest(
    request: SuggestionRequest,
    service: SuggestionService = Depends(get_suggestion_service)
):
    """Refine a task title and suggest subtasks; falls back instead of failing"""
    return await service.suggest(request.title)
