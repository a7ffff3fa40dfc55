# src/app/domain/models.py
"""
Domain models for the recipe collection.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol
from uuid import uuid4


class UserIdentity(Protocol):
    """Anything that carries the authenticated user id."""
    id: str


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class RecipeStatus(str, Enum):
    """Mutually exclusive classification of a recipe in the collection."""
    FAVORITE = "favorite"
    TO_TRY = "to_try"
    MADE_BEFORE = "made_before"


STATUS_ORDER: tuple[RecipeStatus, ...] = (
    RecipeStatus.FAVORITE,
    RecipeStatus.TO_TRY,
    RecipeStatus.MADE_BEFORE,
)

CUISINE_TYPES: tuple[str, ...] = (
    "Italian",
    "Mexican",
    "Asian",
    "American",
    "Mediterranean",
    "Indian",
    "French",
    "Japanese",
    "Thai",
    "Greek",
    "Spanish",
    "Other",
)

COMMON_UNITS: tuple[str, ...] = (
    "cups", "tbsp", "tsp", "oz", "lb", "g", "kg", "ml", "l",
    "pieces", "cloves", "slices", "pinch", "whole",
)

DEFAULT_CUISINE = "Other"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse of form input ("12 min" -> 12, "abc" -> None)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def suggest_units(prefix: str = "") -> list[str]:
    needle = (prefix or "").strip().lower()
    return [unit for unit in COMMON_UNITS if unit.startswith(needle)]


def new_row_id() -> str:
    """Session-local identifier for an edit-time row, never a store id."""
    return uuid4().hex


@dataclass(frozen=True)
class Recipe:
    """Read model of a recipe as consumed by search and listing."""
    id: str
    title: str
    cuisine_type: str
    prep_time: int
    cook_time: int
    difficulty: Difficulty
    status: RecipeStatus
    cover_image: Optional[str] = None

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Recipe":
        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            cuisine_type=str(row.get("cuisine_type") or DEFAULT_CUISINE),
            prep_time=parse_int(row.get("prep_time")) or 0,
            cook_time=parse_int(row.get("cook_time")) or 0,
            difficulty=Difficulty(row.get("difficulty") or Difficulty.MEDIUM.value),
            status=RecipeStatus(row.get("status") or RecipeStatus.TO_TRY.value),
            cover_image=row.get("cover_image") or None,
        )


@dataclass(frozen=True)
class SearchFilters:
    """
    At most one value per facet. ``None`` means the facet is unconstrained,
    which is distinct from every valid value.
    """
    cuisine_type: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    status: Optional[RecipeStatus] = None

    def as_dict(self) -> dict[str, str]:
        """Only the set facets, keyed by facet name."""
        active: dict[str, str] = {}
        if self.cuisine_type is not None:
            active["cuisine_type"] = self.cuisine_type
        if self.difficulty is not None:
            active["difficulty"] = self.difficulty.value
        if self.status is not None:
            active["status"] = self.status.value
        return active

    @property
    def active_count(self) -> int:
        return len(self.as_dict())


FACETS: tuple[str, ...] = ("cuisine_type", "difficulty", "status")


@dataclass
class IngredientRow:
    id: str = field(default_factory=new_row_id)
    name: str = ""
    quantity: str = ""
    unit: str = ""


@dataclass
class InstructionRow:
    id: str = field(default_factory=new_row_id)
    content: str = ""


@dataclass
class RecipeFields:
    """Scalar fields of the editor, kept as raw form text until submit."""
    title: str = ""
    description: str = ""
    cuisine_type: str = DEFAULT_CUISINE
    prep_time: str = ""
    cook_time: str = ""
    servings: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    status: RecipeStatus = RecipeStatus.TO_TRY
    cover_image: str = ""


@dataclass
class ShareState:
    is_public: bool = False
    share_token: Optional[str] = None

    def share_url(self, origin: str) -> Optional[str]:
        if not self.share_token or not origin:
            return None
        return f"{origin.rstrip('/')}/shared/{self.share_token}"


@dataclass
class SharedRecipe:
    """A publicly shared recipe with its ordered child rows."""
    recipe: dict[str, Any]
    ingredients: list[dict[str, Any]] = field(default_factory=list)
    instructions: list[dict[str, Any]] = field(default_factory=list)
