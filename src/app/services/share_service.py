# src/app/services/share_service.py
"""
Share-link management for a single recipe and public token resolution.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional
from uuid import uuid4

from src.app.domain.errors import (
    NotAuthenticatedError,
    RecipeNotFoundError,
    RecipeRepositoryError,
    ShareLinkError,
    ShareTokenNotFoundError,
    VisibilityUpdateError,
)
from src.app.domain.models import SharedRecipe, ShareState, UserIdentity
from src.app.infra.db.base import RecipeRepository

logger = logging.getLogger(__name__)

PUBLIC_RECIPE_FIELDS = (
    "id",
    "title",
    "description",
    "cuisine_type",
    "prep_time",
    "cook_time",
    "servings",
    "difficulty",
    "status",
    "cover_image",
)


def new_share_token() -> str:
    return str(uuid4())


class ShareLinkController:
    """
    Holds ``ShareState`` for one recipe.

    ``toggle_visibility`` is optimistic: the local flag flips first and is
    restored if the store rejects the update. ``generate_link`` never revokes
    earlier tokens, so several links to the same recipe can be valid at once.
    """

    def __init__(
        self,
        repository: RecipeRepository,
        recipe_id: str,
        state: Optional[ShareState] = None,
        token_factory: Callable[[], str] = new_share_token,
    ):
        self._repo = repository
        self.recipe_id = recipe_id
        self.state = state or ShareState()
        self._token_factory = token_factory

    @classmethod
    def load(
        cls,
        repository: RecipeRepository,
        recipe_id: str,
        user: Optional[UserIdentity],
        token_factory: Callable[[], str] = new_share_token,
    ) -> "ShareLinkController":
        if user is None:
            raise NotAuthenticatedError()
        row = repository.get_recipe(recipe_id, str(user.id))
        if row is None:
            raise RecipeNotFoundError(recipe_id)

        token: Optional[str] = None
        try:
            token = repository.latest_share_token(recipe_id)
        except RecipeRepositoryError as exc:
            logger.error("Could not fetch share token for %s: %s", recipe_id, exc.reason)

        state = ShareState(is_public=bool(row.get("is_public")), share_token=token)
        return cls(repository, recipe_id, state, token_factory)

    def toggle_visibility(self) -> bool:
        target = not self.state.is_public
        self.state.is_public = target
        try:
            self._repo.update_visibility(self.recipe_id, target)
        except RecipeRepositoryError as exc:
            self.state.is_public = not target
            logger.error("Visibility update for %s rolled back: %s", self.recipe_id, exc.reason)
            raise VisibilityUpdateError(self.recipe_id, exc.reason) from exc
        logger.info("Recipe %s is now %s", self.recipe_id, "public" if target else "private")
        return target

    def generate_link(self) -> str:
        token = self._token_factory()
        try:
            self._repo.insert_share(self.recipe_id, token)
        except RecipeRepositoryError as exc:
            logger.error("Share link generation for %s failed: %s", self.recipe_id, exc.reason)
            raise ShareLinkError(self.recipe_id, exc.reason) from exc
        self.state.share_token = token
        logger.info("Generated share link for recipe %s", self.recipe_id)
        return token

    def share_url(self, origin: str) -> Optional[str]:
        return self.state.share_url(origin)


def resolve_shared_recipe(repository: RecipeRepository, share_token: str) -> SharedRecipe:
    recipe_id = repository.find_shared_recipe_id(share_token)
    if recipe_id is None:
        raise ShareTokenNotFoundError(share_token)
    row = repository.get_recipe(recipe_id)
    if row is None:
        raise RecipeNotFoundError(recipe_id)
    return SharedRecipe(
        recipe={key: row.get(key) for key in PUBLIC_RECIPE_FIELDS},
        ingredients=repository.list_ingredients(recipe_id),
        instructions=repository.list_instructions(recipe_id),
    )
