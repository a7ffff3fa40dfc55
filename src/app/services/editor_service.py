# src/app/services/editor_service.py
"""
In-memory editor for one recipe: scalar fields plus ordered ingredient and
instruction rows, persisted by a single sequential submit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields as dataclass_fields, replace
from typing import Any, Callable, Generic, Iterable, Iterator, Literal, Optional, TypeVar

from src.app.domain.errors import (
    NotAuthenticatedError,
    RecipeRepositoryError,
    RecipeSubmitError,
    RecipeValidationError,
)
from src.app.domain.models import (
    Difficulty,
    IngredientRow,
    InstructionRow,
    RecipeFields,
    RecipeStatus,
    UserIdentity,
    parse_int,
)
from src.app.infra.db.base import RecipeRepository

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", IngredientRow, InstructionRow)
Direction = Literal["up", "down"]


class RowList(Generic[RowT]):
    """
    Ordered rows that are never empty while editing.

    Removing the only row replaces it with a fresh blank row; reordering is
    limited to swapping adjacent rows.
    """

    def __init__(self, factory: Callable[[], RowT], rows: Optional[Iterable[RowT]] = None):
        self._factory = factory
        self._rows: list[RowT] = list(rows or [])
        if not self._rows:
            self._rows.append(factory())

    def __iter__(self) -> Iterator[RowT]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index: int) -> RowT:
        return self._rows[index]

    @property
    def ids(self) -> list[str]:
        return [row.id for row in self._rows]

    def append(self) -> RowT:
        row = self._factory()
        self._rows.append(row)
        return row

    def update(self, row_id: str, field: str, value: str) -> None:
        if field == "id" or field not in {f.name for f in dataclass_fields(self._rows[0])}:
            raise RecipeValidationError(field, f"Unknown row field: {field}")
        for index, row in enumerate(self._rows):
            if row.id == row_id:
                self._rows[index] = replace(row, **{field: value})
                return

    def remove(self, row_id: str) -> None:
        index = self._index_of(row_id)
        if index is None:
            return
        if len(self._rows) == 1:
            self._rows[0] = self._factory()
            return
        del self._rows[index]

    def swap_adjacent(self, index: int, direction: Direction) -> None:
        if direction not in ("up", "down"):
            raise RecipeValidationError("direction", f"Unknown direction: {direction}")
        if index < 0 or index >= len(self._rows):
            return
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(self._rows):
            return
        self._rows[index], self._rows[target] = self._rows[target], self._rows[index]

    def _index_of(self, row_id: str) -> Optional[int]:
        for index, row in enumerate(self._rows):
            if row.id == row_id:
                return index
        return None


@dataclass(frozen=True)
class SubmitResult:
    recipe_id: str
    ingredient_count: int
    instruction_count: int

    @property
    def location(self) -> str:
        return f"/recipes/{self.recipe_id}"


def _clean(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


def _non_negative(value: Any) -> int:
    parsed = parse_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def _servings(value: Any) -> Optional[int]:
    parsed = parse_int(value)
    if not parsed or parsed < 0:
        return None
    return parsed


class RecipeEditor:
    def __init__(
        self,
        fields: Optional[RecipeFields] = None,
        ingredients: Optional[Iterable[IngredientRow]] = None,
        instructions: Optional[Iterable[InstructionRow]] = None,
        *,
        compensate_on_failure: bool = True,
    ):
        self.fields = fields or RecipeFields()
        self.ingredients: RowList[IngredientRow] = RowList(IngredientRow, ingredients)
        self.instructions: RowList[InstructionRow] = RowList(InstructionRow, instructions)
        self.compensate_on_failure = compensate_on_failure
        self.submitting = False

    def set_field(self, name: str, value: Any) -> None:
        if name not in {f.name for f in dataclass_fields(RecipeFields)}:
            raise RecipeValidationError(name, f"Unknown recipe field: {name}")
        try:
            if name == "difficulty":
                value = Difficulty(value)
            elif name == "status":
                value = RecipeStatus(value)
        except ValueError as exc:
            raise RecipeValidationError(name, f"Invalid {name}: {value}") from exc
        self.fields = replace(self.fields, **{name: value})

    # ingredients

    def add_ingredient(self) -> IngredientRow:
        return self.ingredients.append()

    def update_ingredient(self, row_id: str, field: str, value: str) -> None:
        self.ingredients.update(row_id, field, value)

    def remove_ingredient(self, row_id: str) -> None:
        self.ingredients.remove(row_id)

    # instructions

    def add_instruction(self) -> InstructionRow:
        return self.instructions.append()

    def update_instruction(self, row_id: str, content: str) -> None:
        self.instructions.update(row_id, "content", content)

    def remove_instruction(self, row_id: str) -> None:
        self.instructions.remove(row_id)

    def move_instruction(self, index: int, direction: Direction) -> None:
        self.instructions.swap_adjacent(index, direction)

    # submit

    def validate(self) -> None:
        if not self.fields.title.strip():
            raise RecipeValidationError("title", "Recipe title is required")

    def recipe_payload(self, user_id: str) -> dict[str, Any]:
        f = self.fields
        return {
            "title": f.title.strip(),
            "description": _clean(f.description),
            "cuisine_type": f.cuisine_type,
            "prep_time": _non_negative(f.prep_time),
            "cook_time": _non_negative(f.cook_time),
            "servings": _servings(f.servings),
            "difficulty": f.difficulty.value,
            "status": f.status.value,
            "cover_image": _clean(f.cover_image),
            "user_id": user_id,
        }

    def ingredient_rows(self, recipe_id: str) -> list[dict[str, Any]]:
        valid = [row for row in self.ingredients if row.name.strip()]
        # order_index is the position after blank rows are dropped
        return [
            {
                "recipe_id": recipe_id,
                "name": row.name.strip(),
                "quantity": _clean(row.quantity),
                "unit": _clean(row.unit),
                "order_index": index,
            }
            for index, row in enumerate(valid)
        ]

    def instruction_rows(self, recipe_id: str) -> list[dict[str, Any]]:
        valid = [row for row in self.instructions if row.content.strip()]
        return [
            {
                "recipe_id": recipe_id,
                "step_number": index + 1,
                "content": row.content.strip(),
            }
            for index, row in enumerate(valid)
        ]

    def submit(
        self,
        repository: RecipeRepository,
        resolve_user: Callable[[], Optional[UserIdentity]],
    ) -> SubmitResult:
        """
        Validate, then write the recipe, its ingredients and its instructions
        in that order. Each step starts only after the previous one succeeded.

        Raises:
            RecipeValidationError: before any store call
            NotAuthenticatedError: no current user
            RecipeSubmitError: a store write failed
        """
        self.validate()
        if self.submitting:
            raise RecipeSubmitError("submit", "a submit is already in progress")

        self.submitting = True
        try:
            user = resolve_user()
            if user is None:
                raise NotAuthenticatedError()
            return self._write(repository, str(user.id))
        finally:
            self.submitting = False

    def _write(self, repository: RecipeRepository, user_id: str) -> SubmitResult:
        try:
            recipe_id = repository.insert_recipe(self.recipe_payload(user_id))
        except RecipeRepositoryError as exc:
            logger.error("Recipe insert failed for user=%s: %s", user_id, exc.reason)
            raise RecipeSubmitError("recipe", exc.reason) from exc

        ingredients = self.ingredient_rows(recipe_id)
        instructions = self.instruction_rows(recipe_id)
        stage = "ingredients"
        try:
            if ingredients:
                repository.insert_ingredients(ingredients)
            stage = "instructions"
            if instructions:
                repository.insert_instructions(instructions)
        except RecipeRepositoryError as exc:
            logger.error("Recipe %s: %s insert failed: %s", recipe_id, stage, exc.reason)
            compensated = self._compensate(repository, recipe_id)
            raise RecipeSubmitError(stage, exc.reason, recipe_id=recipe_id, compensated=compensated) from exc

        logger.info(
            "Created recipe: id=%s, user=%s, ingredients=%d, instructions=%d",
            recipe_id,
            user_id,
            len(ingredients),
            len(instructions),
        )
        return SubmitResult(
            recipe_id=recipe_id,
            ingredient_count=len(ingredients),
            instruction_count=len(instructions),
        )

    def _compensate(self, repository: RecipeRepository, recipe_id: str) -> bool:
        if not self.compensate_on_failure:
            logger.warning("Recipe %s left without its child rows", recipe_id)
            return False
        try:
            repository.delete_recipe(recipe_id)
        except RecipeRepositoryError as exc:
            logger.error("Compensating delete of recipe %s failed: %s", recipe_id, exc.reason)
            return False
        logger.info("Compensating delete of recipe %s done", recipe_id)
        return True
