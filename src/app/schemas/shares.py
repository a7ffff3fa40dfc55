from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from src.app.schemas.recipes import IngredientItem, InstructionItem


class ShareStateResponse(BaseModel):
    recipeId: str
    isPublic: bool
    shareToken: Optional[str] = None
    shareUrl: Optional[str] = None


class PublicRecipe(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    cuisineType: Optional[str] = None
    prepTime: int = 0
    cookTime: int = 0
    totalTime: int = 0
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    status: Optional[str] = None
    coverImage: Optional[str] = None


class SharedRecipeResponse(BaseModel):
    recipe: PublicRecipe
    ingredients: list[IngredientItem] = Field(default_factory=list)
    instructions: list[InstructionItem] = Field(default_factory=list)
