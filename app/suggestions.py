import logging
from typing import Any, List, Optional

import google.generativeai as genai
from pydantic import ValidationError as SchemaError
from typing_extensions import TypedDict

from .config import DEFAULT_GEMINI_MODEL
from .errors import SuggestionError
from .schemas import Suggestion

logger = logging.getLogger(__name__)

FALLBACK_SUBTASKS = [
    "Break down task into steps",
    "Set a timer",
    "Start with the easiest part",
]


class SuggestionSchema(TypedDict):
    """Output shape the model is constrained to"""

    refinedTitle: str
    subtasks: List[str]


def build_prompt(task_title: str) -> str:
    return (
        "Refine this task title for better productivity and suggest 3-4 "
        f'actionable subtasks: "{task_title}"\n\n'
        "Return JSON with two fields: refinedTitle, a more professional, "
        "action-oriented version of the task; and subtasks, a list of 3-4 "
        "simple steps to complete it."
    )


def fallback_suggestion(task_title: str) -> Suggestion:
    """Deterministic suggestion used whenever the model can't be used"""
    return Suggestion(refined_title=task_title, subtasks=list(FALLBACK_SUBTASKS))


class SuggestionService:
    """
    Asks Gemini for a refined title and a short checklist.

    ``suggest`` never raises: any failure (no API key, provider or network
    error, malformed output) resolves to ``fallback_suggestion``.
    A ``model`` exposing ``generate_content_async`` can be injected in
    place of the real Gemini model.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        model: Any = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    def _get_model(self):
        if self._model is None:
            if not self.api_key:
                raise SuggestionError("GEMINI_API_KEY environment variable is not set")
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                self.model_name,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=SuggestionSchema,
                ),
            )
        return self._model

    async def _generate(self, task_title: str) -> Suggestion:
        if not task_title.strip():
            raise SuggestionError("Cannot refine an empty title")

        model = self._get_model()
        try:
            response = await model.generate_content_async(build_prompt(task_title))
            text = response.text
        except Exception as e:
            raise SuggestionError(f"Model call failed: {e}") from e

        try:
            return Suggestion.model_validate_json(text.strip())
        except SchemaError as e:
            raise SuggestionError(f"Malformed model output: {e}") from e

    async def suggest(self, task_title: str) -> Suggestion:
        """Get a suggestion for a task title, falling back on any failure"""
        try:
            return await self._generate(task_title or "")
        except Exception as e:
            logger.warning("AI suggester error: %s", e)
            return fallback_suggestion(task_title or "")
