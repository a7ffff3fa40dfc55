from __future__ import annotations

import os

# Settings() is built at import time; give it what it needs before any src import.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

from types import SimpleNamespace
from typing import Any, Callable, Optional, Sequence

import pytest

from src.app.domain.errors import RecipeRepositoryError
from src.app.infra.db.base import RecipeRepository

VALID_TOKEN = "valid-token"
OTHER_TOKEN = "other-user-token"


class InMemoryRecipeRepository(RecipeRepository):
    """Dict-backed store. Operations named in ``fail_on`` raise like a failed request."""

    def __init__(self) -> None:
        self.recipes: dict[str, dict[str, Any]] = {}
        self.ingredients: list[dict[str, Any]] = []
        self.instructions: list[dict[str, Any]] = []
        self.shares: list[dict[str, Any]] = []
        self.fail_on: set[str] = set()
        self.calls: list[str] = []
        self._seq = 0

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise RecipeRepositoryError(operation, "connection reset")

    def _next_id(self, kind: str) -> str:
        self._seq += 1
        return f"{kind}-{self._seq}"

    def add_recipe(self, **overrides: Any) -> str:
        """Seed a row without going through ``insert_recipe``."""
        self._seq += 1
        recipe_id = overrides.pop("id", None) or f"recipe-{self._seq}"
        row = {
            "id": recipe_id,
            "user_id": "user-1",
            "title": "Untitled",
            "description": None,
            "cuisine_type": "Other",
            "prep_time": 0,
            "cook_time": 0,
            "servings": None,
            "difficulty": "medium",
            "status": "to_try",
            "cover_image": None,
            "is_public": False,
            "created_at": f"2026-01-01T00:00:{self._seq:02d}+00:00",
        }
        row.update(overrides)
        self.recipes[recipe_id] = row
        return recipe_id

    def list_recipes(self, user_id: str) -> list[dict[str, Any]]:
        self._check("list_recipes")
        rows = [row for row in self.recipes.values() if row["user_id"] == user_id]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)

    def get_recipe(self, recipe_id: str, user_id: Optional[str] = None) -> Optional[dict[str, Any]]:
        self._check("get_recipe")
        row = self.recipes.get(recipe_id)
        if row is None or (user_id is not None and row["user_id"] != user_id):
            return None
        return dict(row)

    def insert_recipe(self, payload: dict[str, Any]) -> str:
        self._check("insert_recipe")
        return self.add_recipe(**payload)

    def insert_ingredients(self, rows: Sequence[dict[str, Any]]) -> None:
        self._check("insert_ingredients")
        self.ingredients.extend({"id": self._next_id("ing"), **row} for row in rows)

    def insert_instructions(self, rows: Sequence[dict[str, Any]]) -> None:
        self._check("insert_instructions")
        self.instructions.extend({"id": self._next_id("step"), **row} for row in rows)

    def delete_recipe(self, recipe_id: str) -> None:
        self._check("delete_recipe")
        self.instructions = [row for row in self.instructions if row["recipe_id"] != recipe_id]
        self.ingredients = [row for row in self.ingredients if row["recipe_id"] != recipe_id]
        self.recipes.pop(recipe_id, None)

    def list_ingredients(self, recipe_id: str) -> list[dict[str, Any]]:
        self._check("list_ingredients")
        rows = [row for row in self.ingredients if row["recipe_id"] == recipe_id]
        return sorted(rows, key=lambda row: row["order_index"])

    def list_instructions(self, recipe_id: str) -> list[dict[str, Any]]:
        self._check("list_instructions")
        rows = [row for row in self.instructions if row["recipe_id"] == recipe_id]
        return sorted(rows, key=lambda row: row["step_number"])

    def update_visibility(self, recipe_id: str, is_public: bool) -> None:
        self._check("update_visibility")
        self.recipes[recipe_id]["is_public"] = is_public

    def insert_share(self, recipe_id: str, share_token: str) -> None:
        self._check("insert_share")
        self.shares.append(
            {"recipe_id": recipe_id, "share_token": share_token, "is_public_link": True}
        )

    def latest_share_token(self, recipe_id: str) -> Optional[str]:
        self._check("latest_share_token")
        tokens = [
            share["share_token"]
            for share in self.shares
            if share["recipe_id"] == recipe_id and share["is_public_link"]
        ]
        return tokens[-1] if tokens else None

    def find_shared_recipe_id(self, share_token: str) -> Optional[str]:
        self._check("find_shared_recipe_id")
        for share in self.shares:
            if share["share_token"] == share_token and share["is_public_link"]:
                return share["recipe_id"]
        return None


class SupabaseAuthStub:
    def __init__(self) -> None:
        self.users = {
            VALID_TOKEN: SimpleNamespace(
                id="user-1", email="cook@example.com", user_metadata={"name": "Cook"}
            ),
            OTHER_TOKEN: SimpleNamespace(id="user-2", email="other@example.com", user_metadata={}),
        }
        self.exchanged: list[dict[str, str]] = []
        self.valid_codes = {"good-code"}

    def get_user(self, token: str):
        if token not in self.users:
            raise ValueError("invalid JWT")
        return SimpleNamespace(user=self.users[token])

    def exchange_code_for_session(self, params: dict[str, str]):
        self.exchanged.append(params)
        if params.get("auth_code") not in self.valid_codes:
            raise ValueError("invalid flow state")
        return SimpleNamespace(session=SimpleNamespace(access_token=VALID_TOKEN))


class SupabaseClientStub:
    def __init__(self) -> None:
        self.auth = SupabaseAuthStub()


class TimerStub:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by ``advance`` instead of an event loop."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[TimerStub] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> TimerStub:
        timer = TimerStub(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[TimerStub]:
        return [timer for timer in self.timers if not timer.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for timer in list(self.timers):
            if not timer.cancelled and timer.due <= self.now + 1e-9:
                self.timers.remove(timer)
                timer.callback()


@pytest.fixture
def repo() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def supabase_stub() -> SupabaseClientStub:
    return SupabaseClientStub()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {OTHER_TOKEN}"}


@pytest.fixture
def app(repo: InMemoryRecipeRepository, supabase_stub: SupabaseClientStub):
    from src.app.deps import get_recipe_repository, get_supabase
    from src.app.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_supabase] = lambda: supabase_stub
    fastapi_app.dependency_overrides[get_recipe_repository] = lambda: repo
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
