# src/app/deps.py (keeps the client singleton, exposed as a dependency)

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from supabase import Client, create_client

from src.app.config import settings
from src.app.infra.db.base import RecipeRepository
from src.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository
from src.app.services.debounce import DebouncePolicy

logger = logging.getLogger(__name__)

_client: Client | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = create_client(str(settings.SUPABASE_URL),
                                settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


def get_recipe_repository(supa: Client = Depends(get_supabase)) -> RecipeRepository:
    return SupabaseRecipeRepository(supa)


def get_debounce_policy() -> DebouncePolicy:
    return DebouncePolicy.from_milliseconds(
        settings.SEARCH_QUERY_DEBOUNCE_MS,
        settings.SEARCH_FACET_DEBOUNCE_MS,
    )


auth_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None


def resolve_user(supa: Client, token: Optional[str]) -> Optional[CurrentUser]:
    """
    Validates a Supabase access token with GoTrue and returns the minimal
    user data, or None when the token is missing, invalid or expired.
    """
    if not token:
        return None
    try:
        res = supa.auth.get_user(token)
    except Exception as exc:
        # gotrue raises its own error types for expired/invalid tokens
        logger.debug("Token validation failed: %s", exc)
        return None
    user = getattr(res, "user", None)
    if not user:
        return None

    # metadata may carry 'name'
    name = None
    meta = getattr(user, "user_metadata", None) or {}
    if isinstance(meta, dict):
        name = meta.get("name")

    return CurrentUser(id=str(user.id), email=user.email, name=name)


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


async def get_current_user(
    request: Request,
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    supa: Client = Depends(get_supabase),
) -> CurrentUser:
    """
    Receives Authorization: Bearer <access_token> from Supabase and returns
    the user. Reuses the user already resolved by the session guard.
    """
    cached = getattr(request.state, "user", None)
    if isinstance(cached, CurrentUser):
        return cached

    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    user = resolve_user(supa, cred.credentials)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid/expired token")
    return user
