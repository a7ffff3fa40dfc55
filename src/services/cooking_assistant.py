from __future__ import annotations

from itertools import chain
from pathlib import Path
from typing import Any, Iterator, Optional

from src.app.config import settings
from src.services.errors import InvalidAssistantRequestError
from src.services.gemini_client import GeminiClient

PROMPT_DIR = Path(__file__).resolve().parents[2] / "data" / "Prompt"
MEAL_PLAN_SYSTEM_PROMPT = PROMPT_DIR / "MEAL_PLAN_SYSTEM_PROMPT.txt"
SUBSTITUTE_SYSTEM_PROMPT = PROMPT_DIR / "SUBSTITUTE_SYSTEM_PROMPT.txt"
SUGGEST_SYSTEM_PROMPT = PROMPT_DIR / "SUGGEST_SYSTEM_PROMPT.txt"

MIN_PLAN_DAYS = 1
MAX_PLAN_DAYS = 14
NO_PREFERENCES = "no specific dietary restrictions"


def _require_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise InvalidAssistantRequestError("request body must be a JSON object")
    return body


def validate_meal_plan(body: Any) -> tuple[str, int]:
    payload = _require_object(body)
    days = payload.get("days")
    if (
        isinstance(days, bool)
        or not isinstance(days, int)
        or not MIN_PLAN_DAYS <= days <= MAX_PLAN_DAYS
    ):
        raise InvalidAssistantRequestError(
            f"days must be an integer between {MIN_PLAN_DAYS} and {MAX_PLAN_DAYS}"
        )
    preferences = payload.get("preferences")
    if isinstance(preferences, str) and preferences.strip():
        return preferences.strip(), days
    return NO_PREFERENCES, days


def validate_substitute(body: Any) -> str:
    ingredient = _require_object(body).get("ingredient")
    if not isinstance(ingredient, str) or not ingredient.strip():
        raise InvalidAssistantRequestError("ingredient must be a non-empty string")
    return ingredient.strip()


def validate_suggest(body: Any) -> list[str]:
    ingredients = _require_object(body).get("ingredients")
    if not isinstance(ingredients, list) or not ingredients:
        raise InvalidAssistantRequestError("ingredients must be a non-empty array")
    return [str(item) for item in ingredients]


def meal_plan_prompt(preferences: str, days: int) -> str:
    return (
        f"Create a {days}-day meal plan for someone with the following dietary "
        f"preferences: {preferences}. Include breakfast, lunch, dinner, and a snack for each day."
    )


def substitute_prompt(ingredient: str) -> str:
    return (
        f"What are 3 good substitutes for {ingredient}? "
        "Include notes on how each substitute affects the dish."
    )


def suggest_prompt(ingredients: list[str]) -> str:
    return f"I have these ingredients: {', '.join(ingredients)}. Suggest 3 recipes I could make."


def _client(client: Optional[GeminiClient]) -> GeminiClient:
    if client is not None:
        return client
    return GeminiClient(
        api_key=settings.GEMINI_API_KEY.get_secret_value(),
        model_name=settings.GEMINI_MODEL,
    )


def open_stream(chunks: Iterator[str]) -> Iterator[str]:
    """
    Pulls the first chunk eagerly so upstream failures raise here, before a
    streaming response has committed to a status code.
    """
    try:
        first = next(chunks)
    except StopIteration:
        return iter(())
    return chain([first], chunks)


def stream_meal_plan(body: Any, client: Optional[GeminiClient] = None) -> Iterator[str]:
    preferences, days = validate_meal_plan(body)
    chunks = _client(client).stream_content(meal_plan_prompt(preferences, days), MEAL_PLAN_SYSTEM_PROMPT)
    return open_stream(chunks)


def stream_substitutes(body: Any, client: Optional[GeminiClient] = None) -> Iterator[str]:
    ingredient = validate_substitute(body)
    chunks = _client(client).stream_content(substitute_prompt(ingredient), SUBSTITUTE_SYSTEM_PROMPT)
    return open_stream(chunks)


def stream_suggestions(body: Any, client: Optional[GeminiClient] = None) -> Iterator[str]:
    ingredients = validate_suggest(body)
    chunks = _client(client).stream_content(suggest_prompt(ingredients), SUGGEST_SYSTEM_PROMPT)
    return open_stream(chunks)
