from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from src.app.config import settings
from src.app.deps import CurrentUser, get_current_user, get_recipe_repository
from src.app.domain.errors import (
    RecipeNotFoundError,
    RecipeRepositoryError,
    ShareLinkError,
    ShareTokenNotFoundError,
    VisibilityUpdateError,
)
from src.app.domain.models import parse_int
from src.app.infra.db.base import RecipeRepository
from src.app.schemas.recipes import ingredient_item, instruction_item
from src.app.schemas.shares import PublicRecipe, SharedRecipeResponse, ShareStateResponse
from src.app.services.share_service import ShareLinkController, resolve_shared_recipe

logger = logging.getLogger(__name__)

router = APIRouter(tags=["shares"])


def _state_response(controller: ShareLinkController) -> ShareStateResponse:
    return ShareStateResponse(
        recipeId=controller.recipe_id,
        isPublic=controller.state.is_public,
        shareToken=controller.state.share_token,
        shareUrl=controller.share_url(settings.PUBLIC_BASE_URL),
    )


async def _load_controller(
    recipe_id: str, user: CurrentUser, repo: RecipeRepository
) -> ShareLinkController:
    try:
        return await run_in_threadpool(ShareLinkController.load, repo, recipe_id, user)
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except RecipeRepositoryError:
        logger.exception("Failed to load share state for %s", recipe_id)
        raise HTTPException(status_code=502, detail="Failed to load share settings")


@router.get("/recipes/{recipe_id}/share", response_model=ShareStateResponse)
async def get_share_state(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> ShareStateResponse:
    controller = await _load_controller(recipe_id, user, repo)
    return _state_response(controller)


@router.post("/recipes/{recipe_id}/share/visibility", response_model=ShareStateResponse)
async def toggle_visibility(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> ShareStateResponse:
    controller = await _load_controller(recipe_id, user, repo)
    try:
        await run_in_threadpool(controller.toggle_visibility)
    except VisibilityUpdateError:
        raise HTTPException(status_code=502, detail="Failed to update visibility")
    return _state_response(controller)


@router.post("/recipes/{recipe_id}/share/link", response_model=ShareStateResponse)
async def generate_link(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> ShareStateResponse:
    controller = await _load_controller(recipe_id, user, repo)
    try:
        await run_in_threadpool(controller.generate_link)
    except ShareLinkError:
        raise HTTPException(status_code=502, detail="Failed to generate link")
    return _state_response(controller)


@router.get("/shared/{token}", response_model=SharedRecipeResponse)
async def get_shared_recipe(
    token: str,
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> SharedRecipeResponse:
    try:
        shared = await run_in_threadpool(resolve_shared_recipe, repo, token)
    except (ShareTokenNotFoundError, RecipeNotFoundError):
        raise HTTPException(status_code=404, detail="Recipe not found")
    except RecipeRepositoryError:
        logger.exception("Failed to resolve share token")
        raise HTTPException(status_code=502, detail="Failed to load recipe")

    row = shared.recipe
    prep_time = parse_int(row.get("prep_time")) or 0
    cook_time = parse_int(row.get("cook_time")) or 0
    recipe = PublicRecipe(
        id=str(row.get("id")),
        title=str(row.get("title") or ""),
        description=row.get("description"),
        cuisineType=row.get("cuisine_type"),
        prepTime=prep_time,
        cookTime=cook_time,
        totalTime=prep_time + cook_time,
        servings=parse_int(row.get("servings")),
        difficulty=row.get("difficulty"),
        status=row.get("status"),
        coverImage=row.get("cover_image"),
    )
    return SharedRecipeResponse(
        recipe=recipe,
        ingredients=[ingredient_item(item) for item in shared.ingredients],
        instructions=[instruction_item(item) for item in shared.instructions],
    )
