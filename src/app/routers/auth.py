from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from supabase import Client

from src.app.config import settings
from src.app.deps import CurrentUser, get_current_user, get_supabase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUser)
async def me(user: CurrentUser = Depends(get_current_user)):
    return user


@router.get("/callback")
async def auth_callback(
    code: Optional[str] = Query(default=None),
    supa: Client = Depends(get_supabase),
) -> RedirectResponse:
    """
    Target of the confirmation / magic-link email. Exchanges the one-time
    code for a session and sends the user to their collection.
    """
    if code:
        try:
            await run_in_threadpool(supa.auth.exchange_code_for_session, {"auth_code": code})
            return RedirectResponse(url=settings.PROTECTED_PATH_PREFIX, status_code=307)
        except Exception as exc:
            # gotrue raises AuthApiError and friends; any failure means no session
            logger.warning("Auth code exchange failed: %s", exc)

    return RedirectResponse(url=settings.LOGIN_PATH, status_code=307)
