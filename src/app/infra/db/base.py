# src/app/infra/db/base.py
"""
Abstract base class for the recipe store.
This interface allows swapping the Supabase backend for another store.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class RecipeRepository(ABC):
    """
    Abstract interface over the ``recipes``, ``ingredients``, ``instructions``
    and ``recipe_shares`` relations.

    Implementations:
    - SupabaseRecipeRepository: PostgREST tables through supabase-py
    """

    @abstractmethod
    def list_recipes(self, user_id: str) -> list[dict[str, Any]]:
        """
        Fetch the user's recipes, newest first.

        Args:
            user_id: Owner of the recipes

        Returns:
            Rows of the ``recipes`` relation
        """
        pass

    @abstractmethod
    def get_recipe(self, recipe_id: str, user_id: Optional[str] = None) -> Optional[dict[str, Any]]:
        """
        Fetch one recipe row.

        Args:
            recipe_id: The recipe to fetch
            user_id: When given, the row must also belong to this user

        Returns:
            The row, or None if absent
        """
        pass

    @abstractmethod
    def insert_recipe(self, payload: dict[str, Any]) -> str:
        """
        Insert the parent recipe row.

        Returns:
            The persisted recipe id
        """
        pass

    @abstractmethod
    def insert_ingredients(self, rows: Sequence[dict[str, Any]]) -> None:
        pass

    @abstractmethod
    def insert_instructions(self, rows: Sequence[dict[str, Any]]) -> None:
        pass

    @abstractmethod
    def delete_recipe(self, recipe_id: str) -> None:
        """Delete a recipe together with its ingredient and instruction rows."""
        pass

    @abstractmethod
    def list_ingredients(self, recipe_id: str) -> list[dict[str, Any]]:
        """Ingredient rows ordered by ``order_index``."""
        pass

    @abstractmethod
    def list_instructions(self, recipe_id: str) -> list[dict[str, Any]]:
        """Instruction rows ordered by ``step_number``."""
        pass

    @abstractmethod
    def update_visibility(self, recipe_id: str, is_public: bool) -> None:
        pass

    @abstractmethod
    def insert_share(self, recipe_id: str, share_token: str) -> None:
        """Insert a public share link row for the recipe."""
        pass

    @abstractmethod
    def latest_share_token(self, recipe_id: str) -> Optional[str]:
        """Most recently created public share token, or None."""
        pass

    @abstractmethod
    def find_shared_recipe_id(self, share_token: str) -> Optional[str]:
        """Recipe id behind a public share token, or None."""
        pass
