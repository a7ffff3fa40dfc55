from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from src.app.domain.models import Recipe

DifficultyValue = Literal["easy", "medium", "hard"]
StatusValue = Literal["favorite", "to_try", "made_before"]
CollectionStateValue = Literal["empty", "no_matches", "results"]
FormNumber = Union[str, int, float, None]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class RecipeSummary(BaseModel):
    id: str
    title: str
    cuisineType: str
    prepTime: int
    cookTime: int
    totalTime: int
    difficulty: DifficultyValue
    status: StatusValue
    coverImage: Optional[str] = None

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeSummary":
        return cls(
            id=recipe.id,
            title=recipe.title,
            cuisineType=recipe.cuisine_type,
            prepTime=recipe.prep_time,
            cookTime=recipe.cook_time,
            totalTime=recipe.total_time,
            difficulty=recipe.difficulty.value,
            status=recipe.status.value,
            coverImage=recipe.cover_image,
        )


class RecipeCollectionResponse(BaseModel):
    recipes: list[RecipeSummary] = Field(default_factory=list)
    total: int = 0
    matched: int = 0
    statusCounts: dict[StatusValue, int]
    cuisineTypes: list[str] = Field(default_factory=list)
    state: CollectionStateValue


class RecipeOptionsResponse(BaseModel):
    cuisineTypes: list[str]
    difficulties: list[DifficultyValue]
    statuses: list[StatusValue]
    units: list[str]
    queryDebounceMs: int
    facetDebounceMs: int


class IngredientInput(BaseModel):
    id: Optional[str] = None
    name: str = ""
    quantity: FormNumber = ""
    unit: str = ""

    @field_validator("quantity", mode="after")
    @classmethod
    def _quantity_text(cls, value: FormNumber) -> str:
        return _as_text(value)


class InstructionInput(BaseModel):
    id: Optional[str] = None
    content: str = ""


class RecipeCreateRequest(BaseModel):
    title: str = ""
    description: Optional[str] = ""
    cuisineType: str = "Other"
    prepTime: FormNumber = ""
    cookTime: FormNumber = ""
    servings: FormNumber = ""
    difficulty: DifficultyValue = "medium"
    status: StatusValue = "to_try"
    coverImage: Optional[str] = ""
    ingredients: list[IngredientInput] = Field(default_factory=list)
    instructions: list[InstructionInput] = Field(default_factory=list)


class RecipeCreateResponse(BaseModel):
    id: str
    location: str


class IngredientItem(BaseModel):
    id: str
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    orderIndex: Optional[int] = None


class InstructionItem(BaseModel):
    id: str
    stepNumber: int
    content: str


class RecipeDetailResponse(RecipeSummary):
    description: Optional[str] = None
    servings: Optional[int] = None
    isPublic: bool = False
    createdAt: Optional[str] = None
    ingredients: list[IngredientItem] = Field(default_factory=list)
    instructions: list[InstructionItem] = Field(default_factory=list)


def ingredient_item(row: dict[str, Any]) -> IngredientItem:
    quantity = row.get("quantity")
    return IngredientItem(
        id=str(row.get("id") or ""),
        name=str(row.get("name") or ""),
        quantity=None if quantity is None else str(quantity),
        unit=row.get("unit"),
        orderIndex=row.get("order_index"),
    )


def instruction_item(row: dict[str, Any]) -> InstructionItem:
    return InstructionItem(
        id=str(row.get("id") or ""),
        stepNumber=int(row.get("step_number") or 0),
        content=str(row.get("content") or ""),
    )
