from __future__ import annotations

from typing import Optional


class RecipeError(Exception):
    pass


class RecipeValidationError(RecipeError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class NotAuthenticatedError(RecipeError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class RecipeNotFoundError(RecipeError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class ShareTokenNotFoundError(RecipeError):
    def __init__(self, token: str):
        super().__init__(f"Share link not found: {token}")
        self.token = token


class RecipeRepositoryError(RecipeError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Recipe repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class RecipeSubmitError(RecipeError):
    """A submit step failed after validation passed."""

    def __init__(
        self,
        stage: str,
        reason: str,
        recipe_id: Optional[str] = None,
        compensated: bool = False,
    ):
        super().__init__(f"Failed to save recipe during {stage}: {reason}")
        self.stage = stage
        self.reason = reason
        self.recipe_id = recipe_id
        self.compensated = compensated

    @property
    def orphaned(self) -> bool:
        """The parent row was written and is still in the store."""
        return self.recipe_id is not None and not self.compensated


class VisibilityUpdateError(RecipeError):
    def __init__(self, recipe_id: str, reason: str):
        super().__init__(f"Failed to update visibility of {recipe_id}: {reason}")
        self.recipe_id = recipe_id
        self.reason = reason


class ShareLinkError(RecipeError):
    def __init__(self, recipe_id: str, reason: str):
        super().__init__(f"Failed to generate share link for {recipe_id}: {reason}")
        self.recipe_id = recipe_id
        self.reason = reason
