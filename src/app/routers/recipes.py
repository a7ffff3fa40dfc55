# src/app/routers/recipes.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from starlette.concurrency import run_in_threadpool

from src.app.config import settings
from src.app.deps import CurrentUser, get_current_user, get_debounce_policy, get_recipe_repository
from src.app.domain.errors import (
    NotAuthenticatedError,
    RecipeRepositoryError,
    RecipeSubmitError,
    RecipeValidationError,
)
from src.app.domain.models import (
    CUISINE_TYPES,
    STATUS_ORDER,
    Difficulty,
    IngredientRow,
    InstructionRow,
    Recipe,
    RecipeFields,
    RecipeStatus,
    new_row_id,
    parse_int,
    suggest_units,
)
from src.app.infra.db.base import RecipeRepository
from src.app.schemas.recipes import (
    RecipeCollectionResponse,
    RecipeCreateRequest,
    RecipeCreateResponse,
    RecipeDetailResponse,
    RecipeOptionsResponse,
    RecipeSummary,
    ingredient_item,
    instruction_item,
)
from src.app.services.debounce import DebouncePolicy
from src.app.services.editor_service import RecipeEditor
from src.app.services.search_service import parse_filters, summarize

log = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["recipes"])


def _editor_from_request(payload: RecipeCreateRequest) -> RecipeEditor:
    fields = RecipeFields(
        title=payload.title,
        description=payload.description or "",
        cuisine_type=payload.cuisineType,
        prep_time=str(payload.prepTime or ""),
        cook_time=str(payload.cookTime or ""),
        servings=str(payload.servings or ""),
        difficulty=Difficulty(payload.difficulty),
        status=RecipeStatus(payload.status),
        cover_image=payload.coverImage or "",
    )
    ingredients = [
        IngredientRow(
            id=item.id or new_row_id(),
            name=item.name,
            quantity=str(item.quantity or ""),
            unit=item.unit,
        )
        for item in payload.ingredients
    ]
    instructions = [
        InstructionRow(id=item.id or new_row_id(), content=item.content)
        for item in payload.instructions
    ]
    return RecipeEditor(
        fields,
        ingredients,
        instructions,
        compensate_on_failure=settings.SUBMIT_COMPENSATE_ON_FAILURE,
    )


@router.get("", response_model=RecipeCollectionResponse)
async def list_recipes(
    q: str = Query(default=""),
    cuisine_type: Optional[str] = Query(default=None, alias="cuisineType"),
    difficulty: Optional[str] = Query(default=None),
    recipe_status: Optional[str] = Query(default=None, alias="status"),
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeCollectionResponse:
    try:
        filters = parse_filters(cuisine_type, difficulty, recipe_status)
    except RecipeValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)

    try:
        rows = await run_in_threadpool(repo.list_recipes, str(user.id))
    except RecipeRepositoryError:
        # the page still renders, as an empty collection
        log.exception("Failed to fetch recipes for user=%s", user.id)
        rows = []

    recipes = [Recipe.from_row(row) for row in rows]
    summary = summarize(recipes, q, filters)
    return RecipeCollectionResponse(
        recipes=[RecipeSummary.from_recipe(recipe) for recipe in summary.recipes],
        total=summary.total,
        matched=summary.matched,
        statusCounts={key.value: count for key, count in summary.status_counts.items()},
        cuisineTypes=summary.cuisine_types,
        state=summary.state,
    )


@router.get("/options", response_model=RecipeOptionsResponse)
async def recipe_options(
    unit_prefix: str = Query(default="", alias="unit"),
    policy: DebouncePolicy = Depends(get_debounce_policy),
    user: CurrentUser = Depends(get_current_user),
) -> RecipeOptionsResponse:
    return RecipeOptionsResponse(
        cuisineTypes=list(CUISINE_TYPES),
        difficulties=[difficulty.value for difficulty in Difficulty],
        statuses=[value.value for value in STATUS_ORDER],
        units=suggest_units(unit_prefix),
        queryDebounceMs=round(policy.query_delay * 1000),
        facetDebounceMs=round(policy.facet_delay * 1000),
    )


@router.post("", response_model=RecipeCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    payload: RecipeCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeCreateResponse:
    editor = _editor_from_request(payload)
    try:
        result = await run_in_threadpool(editor.submit, repo, lambda: user)
    except RecipeValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except RecipeSubmitError as exc:
        log.error("Recipe submit failed at %s (orphaned=%s)", exc.stage, exc.orphaned)
        raise HTTPException(status_code=502, detail="Failed to save recipe")
    return RecipeCreateResponse(id=result.recipe_id, location=result.location)


@router.get("/{recipe_id}", response_model=RecipeDetailResponse)
async def get_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeDetailResponse:
    try:
        row = await run_in_threadpool(repo.get_recipe, recipe_id, str(user.id))
        if row is None:
            raise HTTPException(status_code=404, detail="Recipe not found")
        ingredients = await run_in_threadpool(repo.list_ingredients, recipe_id)
        instructions = await run_in_threadpool(repo.list_instructions, recipe_id)
    except RecipeRepositoryError:
        log.exception("Failed to load recipe %s", recipe_id)
        raise HTTPException(status_code=502, detail="Failed to load recipe")

    summary = RecipeSummary.from_recipe(Recipe.from_row(row))
    return RecipeDetailResponse(
        **summary.model_dump(),
        description=row.get("description"),
        servings=parse_int(row.get("servings")),
        isPublic=bool(row.get("is_public")),
        createdAt=str(row["created_at"]) if row.get("created_at") else None,
        ingredients=[ingredient_item(item) for item in ingredients],
        instructions=[instruction_item(item) for item in instructions],
    )
