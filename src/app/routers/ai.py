from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterator, Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from src.services import cooking_assistant
from src.services.errors import (
    CompletionFailedError,
    GeminiConfigurationError,
    GeminiPromptError,
    InvalidAssistantRequestError,
    RateLimitedError,
)
from src.services.gemini_client import GeminiClient

log = logging.getLogger("ai")
router = APIRouter(prefix="/api/ai", tags=["ai"])

StreamFactory = Callable[[Any, Optional[GeminiClient]], Iterator[str]]


def get_assistant_client() -> Optional[GeminiClient]:
    """None lets the assistant build a client from settings after validation."""
    return None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _stream(request: Request, factory: StreamFactory, client: Optional[GeminiClient]):
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(400, "request body must be valid JSON")

    try:
        chunks = await run_in_threadpool(factory, body, client)
    except InvalidAssistantRequestError as exc:
        log.info("Rejected %s: %s", request.url.path, exc.message)
        return _error(400, exc.message)
    except RateLimitedError as exc:
        log.warning("Gemini rate limit on %s", request.url.path)
        return _error(429, str(exc))
    except (GeminiConfigurationError, GeminiPromptError) as exc:
        log.error("Assistant misconfigured: %s", exc)
        return _error(500, "assistant is not configured")
    except (CompletionFailedError, httpx.HTTPError) as exc:
        log.error("Gemini request failed on %s: %s", request.url.path, exc)
        return _error(502, "failed to generate a response")

    return StreamingResponse(chunks, media_type="text/plain; charset=utf-8")


@router.post("/meal-plan")
async def meal_plan(request: Request, client: Optional[GeminiClient] = Depends(get_assistant_client)):
    return await _stream(request, cooking_assistant.stream_meal_plan, client)


@router.post("/substitute")
async def substitute(request: Request, client: Optional[GeminiClient] = Depends(get_assistant_client)):
    return await _stream(request, cooking_assistant.stream_substitutes, client)


@router.post("/suggest")
async def suggest(request: Request, client: Optional[GeminiClient] = Depends(get_assistant_client)):
    return await _stream(request, cooking_assistant.stream_suggestions, client)
