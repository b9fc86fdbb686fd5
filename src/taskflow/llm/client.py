# src/taskflow/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..core.ports import ChatMessage
from ..errors import NotConfigured, SynthesisUnavailable

logger = logging.getLogger(__name__)


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {
        "AuthenticationError",
        "PermissionDeniedError",
        "UnauthorizedError",
    }


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"RateLimitError", "TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    # APITimeoutError is a subclass of APIConnectionError.
    if isinstance(exc, (openai.APIConnectionError, httpx.TimeoutException, TimeoutError)):
        return True
    return exc.__class__.__name__ in {
        "APIConnectionError",
        "APITimeoutError",
        "ConnectTimeout",
        "ReadTimeout",
        "WriteTimeout",
    }


def _is_not_found_error(exc: Exception) -> bool:
    # OpenAI-compatible SDKs use NotFoundError for HTTP 404 (unknown model).
    if isinstance(exc, openai.NotFoundError):
        return True
    return exc.__class__.__name__ in {"NotFoundError"}


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(
        connect=connect_s,
        read=read_s,
        write=10.0,
        pool=connect_s,
    )


def friendly_error_message(err: Exception) -> str:
    """User-facing text for a synthesis failure."""
    if isinstance(err, NotConfigured):
        return (
            "AI is not configured (missing API key). "
            "Set TASKFLOW_GROQ_API_KEY in .env, or fill the task in manually."
        )
    msg = str(err).strip()
    if not msg:
        return "AI generation failed. Fill the task in manually or try again."
    return msg


def _message_text(completion: Any) -> str:
    try:
        content = completion.choices[0].message.content
    except (AttributeError, IndexError, TypeError):
        return ""
    return (content or "").strip()


class OpenAICompatibleClient:
    """
    One-shot chat completion against an OpenAI-compatible endpoint
    (Groq by default).

    - No secrets required at construction; NotConfigured is raised on the
      first complete() call when the API key is missing.
    - Automatic SDK retries are disabled: exactly one HTTP request per call.
    """

    def __init__(self, settings: Any, *, sdk_client: Any | None = None) -> None:
        self._settings = settings
        self._client = sdk_client

    def _check_configured(self) -> None:
        api_key = getattr(self._settings, "groq_api_key", None)
        if not api_key or not str(api_key).strip():
            raise NotConfigured("LLM API key is not set. Set TASKFLOW_GROQ_API_KEY in your .env.")
        base_url = str(getattr(self._settings, "llm_base_url", "") or "")
        if not base_url.strip():
            raise NotConfigured("LLM base URL is not set. Set TASKFLOW_LLM_BASE_URL in your .env.")
        model = str(getattr(self._settings, "llm_model", "") or "")
        if not model.strip():
            raise NotConfigured("LLM model is not set. Set TASKFLOW_LLM_MODEL in your .env.")

    def _get_client(self) -> Any:
        """Lazily create and cache the SDK client."""
        if self._client is not None:
            return self._client

        s = self._settings
        self._client = OpenAI(
            base_url=str(s.llm_base_url),
            api_key=str(s.groq_api_key),
            timeout=_make_timeout(
                connect_s=float(getattr(s, "llm_connect_timeout", 5.0)),
                read_s=float(getattr(s, "llm_read_timeout", 30.0)),
            ),
            max_retries=0,
        )
        return self._client

    def complete(self, messages: list[ChatMessage], system_prompt: str) -> str:
        """
        Send one chat-completion request and return the stripped text.

        Raises:
        - NotConfigured before any request when the key/base URL/model is missing.
        - SynthesisUnavailable when the request fails (auth, network,
          timeout, rate limit, unknown model, any other API error).
        """
        self._check_configured()
        client = self._get_client()

        s = self._settings
        model = str(s.llm_model).strip()
        t0 = time.monotonic()
        logger.info("LLM: requesting completion model=%s", model)

        try:
            completion = client.chat.completions.create(
                model=model,
                messages=[{"role": "system", "content": system_prompt}, *messages],
                temperature=float(getattr(s, "llm_temperature", 0.4)),
                max_tokens=int(getattr(s, "llm_max_tokens", 256)),
            )
        except Exception as e:
            if _is_auth_error(e):
                raise SynthesisUnavailable(
                    "LLM authentication failed. Check your API key (TASKFLOW_GROQ_API_KEY)."
                ) from e
            if _is_rate_limit_error(e):
                raise SynthesisUnavailable("LLM is rate-limited. Try again later.") from e
            if _is_connection_error(e):
                raise SynthesisUnavailable("LLM network/timeout error. Try again later.") from e
            if _is_not_found_error(e):
                raise SynthesisUnavailable(
                    f"LLM model not available: {model}. Set TASKFLOW_LLM_MODEL."
                ) from e
            logger.info("LLM: error on model=%s (%s)", model, e.__class__.__name__)
            raise SynthesisUnavailable(f"LLM request failed ({e.__class__.__name__}).") from e

        text = _message_text(completion)
        logger.info("LLM: completed model=%s (%.2fs, %d chars)", model, time.monotonic() - t0, len(text))
        return text
