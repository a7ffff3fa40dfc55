# src/app/main.py
from __future__ import annotations
import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.app.config import settings
from src.app.middleware import SessionGuardMiddleware
from src.app.routers.ai import router as ai_router
from src.app.routers.auth import router as auth_router
from src.app.routers.recipes import router as recipes_router
from src.app.routers.shares import router as shares_router

# Plain stdout logging, works for dev and containers
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

app = FastAPI(title="Recipe Collection API", version="0.3.0")

# Session guard runs inside CORS so preflight requests never get redirected
app.add_middleware(
    SessionGuardMiddleware,
    prefix=settings.PROTECTED_PATH_PREFIX,
    login_path=settings.LOGIN_PATH,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(recipes_router)
app.include_router(shares_router)
app.include_router(ai_router)


@app.get("/health")
def health():
    return {"ok": True}
