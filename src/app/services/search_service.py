# src/app/services/search_service.py
"""
Search and filtering over an in-memory recipe collection.

The matching functions are pure and total: they never mutate the source list
and always preserve its relative order. ``SearchSession`` adds the stateful
side (query text, facet selections, debounced propagation) on top of them.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Literal, Optional, Sequence

from src.app.domain.errors import RecipeValidationError
from src.app.domain.models import (
    CUISINE_TYPES,
    FACETS,
    STATUS_ORDER,
    Difficulty,
    Recipe,
    RecipeStatus,
    SearchFilters,
)
from src.app.services.debounce import Debouncer, DebouncePolicy, Scheduler, asyncio_scheduler

logger = logging.getLogger(__name__)

CollectionState = Literal["empty", "no_matches", "results"]


def matches(recipe: Recipe, query: str, filters: SearchFilters) -> bool:
    lower_query = query.lower()
    if (
        lower_query
        and lower_query not in recipe.title.lower()
        and lower_query not in recipe.cuisine_type.lower()
    ):
        return False
    if filters.status is not None and recipe.status != filters.status:
        return False
    if filters.difficulty is not None and recipe.difficulty != filters.difficulty:
        return False
    # exact match, unlike the free-text query
    if filters.cuisine_type is not None and recipe.cuisine_type != filters.cuisine_type:
        return False
    return True


def filter_recipes(
    recipes: Sequence[Recipe],
    query: str = "",
    filters: Optional[SearchFilters] = None,
) -> list[Recipe]:
    active = filters or SearchFilters()
    return [recipe for recipe in recipes if matches(recipe, query, active)]


def count_by_status(recipes: Iterable[Recipe]) -> dict[RecipeStatus, int]:
    counts = {status: 0 for status in STATUS_ORDER}
    for recipe in recipes:
        counts[recipe.status] += 1
    return counts


def cuisine_options(recipes: Iterable[Recipe]) -> list[str]:
    present = sorted({recipe.cuisine_type for recipe in recipes if recipe.cuisine_type})
    return present or list(CUISINE_TYPES)


def parse_filters(
    cuisine_type: Optional[str] = None,
    difficulty: Optional[str] = None,
    status: Optional[str] = None,
) -> SearchFilters:
    """Build filters from raw text; blank values leave the facet unconstrained."""
    return SearchFilters(
        cuisine_type=(cuisine_type or "").strip() or None,
        difficulty=_parse_enum(Difficulty, "difficulty", difficulty),
        status=_parse_enum(RecipeStatus, "status", status),
    )


def _parse_enum(enum_cls, field_name: str, value: Optional[str]):
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise RecipeValidationError(field_name, f"Invalid {field_name}: {value}") from exc


@dataclass(frozen=True)
class CollectionSummary:
    recipes: tuple[Recipe, ...]
    total: int
    status_counts: dict[RecipeStatus, int]
    cuisine_types: list[str]

    @property
    def matched(self) -> int:
        return len(self.recipes)

    @property
    def state(self) -> CollectionState:
        # An empty collection and an empty search result are reported differently.
        if self.total == 0:
            return "empty"
        if not self.recipes:
            return "no_matches"
        return "results"


def summarize(
    recipes: Sequence[Recipe],
    query: str = "",
    filters: Optional[SearchFilters] = None,
) -> CollectionSummary:
    return CollectionSummary(
        recipes=tuple(filter_recipes(recipes, query, filters)),
        total=len(recipes),
        status_counts=count_by_status(recipes),
        cuisine_types=cuisine_options(recipes),
    )


@dataclass
class _Selection:
    query: str = ""
    filters: SearchFilters = field(default_factory=SearchFilters)


class SearchSession:
    """
    Interactive search state over a fixed recipe snapshot.

    ``query`` and ``filters`` are the live input values; ``summary`` reflects
    the last propagated pair. Query edits propagate after
    ``policy.query_delay``; facet edits after ``policy.facet_delay``.

    With the default ``asyncio_scheduler`` the session must be created inside
    a running event loop (RuntimeError otherwise). Synchronous callers pass
    their own ``scheduler``.
    """

    def __init__(
        self,
        recipes: Sequence[Recipe],
        on_change: Optional[Callable[[CollectionSummary], None]] = None,
        policy: DebouncePolicy = DebouncePolicy(),
        scheduler: Scheduler = asyncio_scheduler,
    ):
        if scheduler is asyncio_scheduler:
            # fail at construction, not on the first debounced edit
            asyncio.get_running_loop()
        self._recipes = tuple(recipes)
        self._on_change = on_change
        self._policy = policy
        self._live = _Selection()
        self._debouncer = Debouncer(self._propagate, scheduler)
        self.open_facet: Optional[str] = None
        self.summary = summarize(self._recipes)

    @property
    def query(self) -> str:
        return self._live.query

    @property
    def filters(self) -> SearchFilters:
        return self._live.filters

    @property
    def has_active_input(self) -> bool:
        return bool(self._live.query) or self._live.filters.active_count > 0

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def set_query(self, query: str) -> None:
        self._live.query = query
        self._debouncer.trigger(self._policy.query_delay)

    def toggle_facet_menu(self, facet: str) -> None:
        _check_facet(facet)
        self.open_facet = None if self.open_facet == facet else facet

    def close_facet_menu(self) -> None:
        self.open_facet = None

    def set_filter(self, facet: str, value: str) -> None:
        _check_facet(facet)
        current = self._live.filters.as_dict()
        current[facet] = value
        self._live.filters = parse_filters(**current)
        self.open_facet = None
        self._debouncer.trigger(self._policy.facet_delay)

    def clear_filter(self, facet: str) -> None:
        _check_facet(facet)
        self._live.filters = replace(self._live.filters, **{facet: None})
        self._debouncer.trigger(self._policy.facet_delay)

    def clear_all(self) -> None:
        self._live = _Selection()
        self._debouncer.trigger(self._policy.facet_delay)

    def flush(self) -> None:
        self._debouncer.flush()

    def _propagate(self) -> None:
        self.summary = summarize(self._recipes, self._live.query, self._live.filters)
        logger.debug(
            "Search propagated: query=%r, filters=%s, matched=%d/%d",
            self._live.query,
            self._live.filters.as_dict(),
            self.summary.matched,
            self.summary.total,
        )
        if self._on_change is not None:
            self._on_change(self.summary)


def _check_facet(facet: str) -> None:
    if facet not in FACETS:
        raise RecipeValidationError("facet", f"Unknown filter facet: {facet}")
