from __future__ import annotations

import logging
import os
from typing import Any, Callable, Optional, Sequence, TypeVar

import httpx
from supabase import Client, PostgrestAPIError, create_client

from src.app.domain.errors import RecipeRepositoryError
from src.app.infra.db.base import RecipeRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECIPE_COLUMNS = (
    "id,title,description,cuisine_type,prep_time,cook_time,servings,"
    "difficulty,status,cover_image,is_public,user_id,created_at"
)
_STORE_ERRORS = (PostgrestAPIError, httpx.HTTPError, ConnectionError, TimeoutError)


def _create_supabase_client() -> Client:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
    return create_client(url, key)


def _first_row(data: Any) -> Optional[dict[str, Any]]:
    if isinstance(data, list) and data:
        return data[0]
    if isinstance(data, dict) and data:
        return data
    return None


class SupabaseRecipeRepository(RecipeRepository):
    RECIPES = "recipes"
    INGREDIENTS = "ingredients"
    INSTRUCTIONS = "instructions"
    SHARES = "recipe_shares"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def _run(self, operation: str, call: Callable[[], T]) -> T:
        try:
            return call()
        except _STORE_ERRORS as error:
            logger.error("Store error during %s: %s", operation, error)
            raise RecipeRepositoryError(operation, str(error)) from error

    def list_recipes(self, user_id: str) -> list[dict[str, Any]]:
        result = self._run(
            "list_recipes",
            lambda: self._client.table(self.RECIPES)
            .select(RECIPE_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute(),
        )
        return result.data or []

    def get_recipe(self, recipe_id: str, user_id: Optional[str] = None) -> Optional[dict[str, Any]]:
        def _query():
            query = self._client.table(self.RECIPES).select(RECIPE_COLUMNS).eq("id", recipe_id)
            if user_id is not None:
                query = query.eq("user_id", user_id)
            return query.limit(1).execute()

        result = self._run("get_recipe", _query)
        return _first_row(result.data)

    def insert_recipe(self, payload: dict[str, Any]) -> str:
        result = self._run(
            "insert_recipe",
            lambda: self._client.table(self.RECIPES).insert(payload).execute(),
        )
        row = _first_row(result.data)
        if not row or not row.get("id"):
            raise RecipeRepositoryError("insert_recipe", "insert returned no id")
        recipe_id = str(row["id"])
        logger.info("Inserted recipe: id=%s, user=%s", recipe_id, payload.get("user_id"))
        return recipe_id

    def insert_ingredients(self, rows: Sequence[dict[str, Any]]) -> None:
        payload = list(rows)
        self._run(
            "insert_ingredients",
            lambda: self._client.table(self.INGREDIENTS).insert(payload).execute(),
        )

    def insert_instructions(self, rows: Sequence[dict[str, Any]]) -> None:
        payload = list(rows)
        self._run(
            "insert_instructions",
            lambda: self._client.table(self.INSTRUCTIONS).insert(payload).execute(),
        )

    def delete_recipe(self, recipe_id: str) -> None:
        def _delete():
            self._client.table(self.INSTRUCTIONS).delete().eq("recipe_id", recipe_id).execute()
            self._client.table(self.INGREDIENTS).delete().eq("recipe_id", recipe_id).execute()
            return self._client.table(self.RECIPES).delete().eq("id", recipe_id).execute()

        self._run("delete_recipe", _delete)
        logger.info("Deleted recipe: id=%s", recipe_id)

    def list_ingredients(self, recipe_id: str) -> list[dict[str, Any]]:
        result = self._run(
            "list_ingredients",
            lambda: self._client.table(self.INGREDIENTS)
            .select("id,name,quantity,unit,order_index")
            .eq("recipe_id", recipe_id)
            .order("order_index", desc=False)
            .execute(),
        )
        return result.data or []

    def list_instructions(self, recipe_id: str) -> list[dict[str, Any]]:
        result = self._run(
            "list_instructions",
            lambda: self._client.table(self.INSTRUCTIONS)
            .select("id,step_number,content")
            .eq("recipe_id", recipe_id)
            .order("step_number", desc=False)
            .execute(),
        )
        return result.data or []

    def update_visibility(self, recipe_id: str, is_public: bool) -> None:
        self._run(
            "update_visibility",
            lambda: self._client.table(self.RECIPES)
            .update({"is_public": is_public})
            .eq("id", recipe_id)
            .execute(),
        )

    def insert_share(self, recipe_id: str, share_token: str) -> None:
        payload = {
            "recipe_id": recipe_id,
            "share_token": share_token,
            "is_public_link": True,
        }
        self._run(
            "insert_share",
            lambda: self._client.table(self.SHARES).insert(payload).execute(),
        )

    def latest_share_token(self, recipe_id: str) -> Optional[str]:
        result = self._run(
            "latest_share_token",
            lambda: self._client.table(self.SHARES)
            .select("share_token")
            .eq("recipe_id", recipe_id)
            .eq("is_public_link", True)
            .order("created_at", desc=True)
            .limit(1)
            .execute(),
        )
        row = _first_row(result.data)
        if not row or not row.get("share_token"):
            return None
        return str(row["share_token"])

    def find_shared_recipe_id(self, share_token: str) -> Optional[str]:
        result = self._run(
            "find_shared_recipe_id",
            lambda: self._client.table(self.SHARES)
            .select("recipe_id")
            .eq("share_token", share_token)
            .eq("is_public_link", True)
            .limit(1)
            .execute(),
        )
        row = _first_row(result.data)
        if not row or not row.get("recipe_id"):
            return None
        return str(row["recipe_id"])
