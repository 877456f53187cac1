import json

import pytest

from app import suggestions
from app.suggestions import FALLBACK_SUBTASKS, SuggestionSchema, SuggestionService

from .fakes import FakeModel


@pytest.mark.asyncio
async def test_parses_structured_model_output() -> None:
    model = FakeModel(
        text=json.dumps(
            {
                "refinedTitle": "Buy 2L of oat milk",
                "subtasks": ["Check fridge", "Go to store", "Pay"],
            }
        )
    )
    service = SuggestionService(model=model)

    suggestion = await service.suggest("buy milk")

    assert suggestion.refined_title == "Buy 2L of oat milk"
    assert suggestion.subtasks == ["Check fridge", "Go to store", "Pay"]
    assert '"buy milk"' in model.prompts[0]


@pytest.mark.asyncio
async def test_empty_title_falls_back_without_calling_model() -> None:
    model = FakeModel(text="{}")
    suggestion = await SuggestionService(model=model).suggest("")

    assert suggestion.refined_title == ""
    assert suggestion.subtasks == FALLBACK_SUBTASKS
    assert model.prompts == []


@pytest.mark.asyncio
async def test_provider_outage_falls_back() -> None:
    model = FakeModel(error=ConnectionError("provider down"))
    suggestion = await SuggestionService(model=model).suggest("Buy milk")

    assert suggestion.refined_title == "Buy milk"
    assert suggestion.subtasks == FALLBACK_SUBTASKS


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        '{"refinedTitle": "x"}',
        '{"refinedTitle": 3, "subtasks": "nope"}',
    ],
)
async def test_malformed_output_falls_back(text: str) -> None:
    suggestion = await SuggestionService(model=FakeModel(text=text)).suggest("Buy milk")

    assert suggestion.refined_title == "Buy milk"
    assert suggestion.subtasks == FALLBACK_SUBTASKS


@pytest.mark.asyncio
async def test_missing_api_key_falls_back() -> None:
    suggestion = await SuggestionService(api_key=None).suggest("Buy milk")

    assert suggestion.refined_title == "Buy milk"
    assert suggestion.subtasks == FALLBACK_SUBTASKS


@pytest.mark.asyncio
async def test_fallback_subtasks_are_a_fresh_list() -> None:
    service = SuggestionService(api_key=None)
    first = await service.suggest("a")
    first.subtasks.append("extra")

    second = await service.suggest("b")
    assert second.subtasks == FALLBACK_SUBTASKS


@pytest.mark.asyncio
async def test_none_title_falls_back() -> None:
    suggestion = await SuggestionService(api_key=None).suggest(None)

    assert suggestion.refined_title == ""
    assert suggestion.subtasks == FALLBACK_SUBTASKS


@pytest.mark.asyncio
async def test_builds_gemini_model_with_json_schema(monkeypatch) -> None:
    configured = {}
    built = []

    class FakeGenerativeModel(FakeModel):
        def __init__(self, model_name, generation_config=None):
            super().__init__(text='{"refinedTitle": "Buy milk today", "subtasks": ["a", "b", "c"]}')
            self.model_name = model_name
            self.generation_config = generation_config
            built.append(self)

    monkeypatch.setattr(suggestions.genai, "configure", lambda **kwargs: configured.update(kwargs))
    monkeypatch.setattr(suggestions.genai, "GenerativeModel", FakeGenerativeModel)

    service = SuggestionService(api_key="secret", model_name="gemini-test")
    first = await service.suggest("buy milk")
    await service.suggest("walk dog")

    assert configured == {"api_key": "secret"}
    assert len(built) == 1
    model = built[0]
    assert model.model_name == "gemini-test"
    assert model.generation_config.response_mime_type == "application/json"
    assert model.generation_config.response_schema is SuggestionSchema
    assert first.refined_title == "Buy milk today"
