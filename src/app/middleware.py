"""
Session guard for the recipe collection routes.
"""
from __future__ import annotations

import logging

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from src.app.deps import bearer_token, get_supabase, resolve_user

logger = logging.getLogger(__name__)


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """
    Redirects requests under ``prefix`` to ``login_path`` unless they carry a
    valid session. The resolved user is left on ``request.state.user``.
    """

    def __init__(self, app, prefix: str = "/recipes", login_path: str = "/login"):
        super().__init__(app)
        self.prefix = prefix.rstrip("/")
        self.login_path = login_path

    def is_protected(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.is_protected(request.url.path):
            return await call_next(request)

        # honour dependency overrides so the guard and the routes share one client
        provider = request.app.dependency_overrides.get(get_supabase, get_supabase)
        supa = provider()
        user = await run_in_threadpool(resolve_user, supa, bearer_token(request))
        if user is None:
            logger.debug("No session for %s, redirecting to %s", request.url.path, self.login_path)
            return RedirectResponse(url=self.login_path, status_code=307)

        request.state.user = user
        return await call_next(request)
