from __future__ import annotations

import pytest

from src.app.middleware import SessionGuardMiddleware


class TestIsProtected:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/recipes", True),
            ("/recipes/", True),
            ("/recipes/abc/share", True),
            ("/recipes-archive", False),
            ("/shared/tok", False),
            ("/health", False),
            ("/", False),
        ],
    )
    def test_prefix(self, path, expected) -> None:
        guard = SessionGuardMiddleware(app=None, prefix="/recipes/")
        assert guard.is_protected(path) is expected


class TestSessionGuard:
    def test_redirects_without_session(self, client) -> None:
        res = client.get("/recipes", follow_redirects=False)
        assert res.status_code == 307
        assert res.headers["location"] == "/login"

    def test_redirects_with_invalid_token(self, client) -> None:
        res = client.get(
            "/recipes/abc/share",
            headers={"Authorization": "Bearer expired"},
            follow_redirects=False,
        )
        assert res.status_code == 307

    def test_passes_with_session(self, client, auth_headers) -> None:
        res = client.get("/recipes", headers=auth_headers, follow_redirects=False)
        assert res.status_code == 200

    def test_public_routes_are_not_guarded(self, client) -> None:
        assert client.get("/health").json() == {"ok": True}


class TestAuthRoutes:
    def test_me(self, client, auth_headers) -> None:
        res = client.get("/auth/me", headers=auth_headers)
        assert res.status_code == 200
        assert res.json() == {"id": "user-1", "email": "cook@example.com", "name": "Cook"}

    def test_me_without_token(self, client) -> None:
        assert client.get("/auth/me").status_code == 401

    def test_callback_exchanges_code(self, client, supabase_stub) -> None:
        res = client.get("/auth/callback", params={"code": "good-code"}, follow_redirects=False)
        assert res.status_code == 307
        assert res.headers["location"] == "/recipes"
        assert supabase_stub.auth.exchanged == [{"auth_code": "good-code"}]

    def test_callback_with_bad_code(self, client) -> None:
        res = client.get("/auth/callback", params={"code": "stale"}, follow_redirects=False)
        assert res.headers["location"] == "/login"

    def test_callback_without_code(self, client, supabase_stub) -> None:
        res = client.get("/auth/callback", follow_redirects=False)
        assert res.headers["location"] == "/login"
        assert supabase_stub.auth.exchanged == []
