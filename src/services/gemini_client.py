from __future__ import annotations

from pathlib import Path
from typing import Iterator

import httpx
from google import genai
from google.genai import types
from google.genai.errors import APIError

from src.services.errors import (
    CompletionFailedError,
    GeminiConfigurationError,
    GeminiPromptError,
    RateLimitedError,
)


def _is_rate_limited_error(exc: Exception) -> bool:
    status_code = getattr(exc, "code", None) or getattr(exc, "status_code", None)
    if status_code == 429:
        return True
    return "RESOURCE_EXHAUSTED" in str(exc)


class GeminiClient:
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash") -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._client = self._configure_api()

    def _configure_api(self) -> genai.Client:
        if not self.api_key:
            raise GeminiConfigurationError("Missing Gemini API key.")
        return genai.Client(api_key=self.api_key)

    def _load_system_prompt(self, file_path: Path) -> str:
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError as not_found_error:
            raise GeminiPromptError(f"Prompt file not found: {file_path}") from not_found_error
        except (OSError, IOError) as io_error:
            raise GeminiPromptError(f"Unable to read prompt file: {io_error}") from io_error

    def stream_content(self, user_prompt: str, system_prompt_path: Path) -> Iterator[str]:
        """
        Yields response text as the model produces it.

        The system prompt is read and the request is opened before the first
        chunk is yielded, so configuration and prompt errors surface on the
        first ``next()``.
        """
        system_instruction = self._load_system_prompt(system_prompt_path)
        config = types.GenerateContentConfig(system_instruction=system_instruction)
        try:
            for chunk in self._client.models.generate_content_stream(
                model=self.model_name,
                contents=user_prompt,
                config=config,
            ):
                text = getattr(chunk, "text", None)
                if text:
                    yield text
        except APIError as err:
            if _is_rate_limited_error(err):
                raise RateLimitedError(
                    "Gemini API rate limit reached. Try again in a moment."
                ) from err
            raise CompletionFailedError(str(err)) from err
        except httpx.HTTPError as err:
            # transport failures (connect, timeout) never reach APIError
            raise CompletionFailedError(f"Gemini request failed: {err}") from err
