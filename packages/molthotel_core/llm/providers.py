"""Provider adapter for party chat generation.

This module uses an OpenAI-compatible Chat Completions API contract so a
single integration path can work across multiple model vendors (OpenAI,
Groq, local gateways).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib import error, parse, request
import json
import os


DEFAULT_OPENAI_COMPATIBLE_BASE_URL = "https://api.openai.com/v1"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_TIMEOUT_MS = 20000


def _truthy_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


@dataclass(frozen=True)
class ProviderExecutionResult:
    text: str
    model_name: str
    prompt_tokens: int | None = None
    completion_tokens: int | None = None


class ProviderError(RuntimeError):
    def __init__(self, message: str, *, error_code: str, model_name: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.model_name = model_name


class ProviderUnavailableError(ProviderError):
    pass


class ProviderExecutionError(ProviderError):
    pass


@dataclass(frozen=True)
class ChatProviderConfig:
    provider: str
    model: str
    base_url: str
    api_key: str | None
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def model_name(self) -> str:
        return f"{self.provider}:{self.model}"


def _provider_label(base_url: str) -> str:
    host = (parse.urlparse(base_url).hostname or "").lower()
    if host == "groq.com" or host.endswith(".groq.com"):
        return "groq"
    if host == "openai.com" or host.endswith(".openai.com"):
        return "openai"
    return "openai_compatible"


def chat_provider_config() -> ChatProviderConfig:
    """Resolve the chat backend from the environment.

    An explicit MOLTHOTEL_LLM_* setting wins; otherwise a Groq key selects
    Groq's OpenAI-compatible endpoint and model, and an OpenAI key the
    OpenAI defaults.
    """
    groq_key = _first_non_empty(os.environ.get("GROQ_API_KEY"))
    api_key = _first_non_empty(
        os.environ.get("MOLTHOTEL_LLM_API_KEY"),
        groq_key,
        os.environ.get("OPENAI_API_KEY"),
    )
    if not api_key and not _truthy_env("MOLTHOTEL_LLM_ALLOW_EMPTY_API_KEY", False):
        raise ProviderUnavailableError("No API key configured for chat generation", error_code="missing_api_key")

    model = _first_non_empty(os.environ.get("MOLTHOTEL_LLM_MODEL")) or (
        DEFAULT_GROQ_MODEL if groq_key else DEFAULT_OPENAI_MODEL
    )
    base_url = _first_non_empty(os.environ.get("MOLTHOTEL_LLM_BASE_URL")) or (
        GROQ_BASE_URL if groq_key else DEFAULT_OPENAI_COMPATIBLE_BASE_URL
    )

    timeout_ms = DEFAULT_TIMEOUT_MS
    raw_timeout = _first_non_empty(os.environ.get("MOLTHOTEL_LLM_TIMEOUT_SECONDS"))
    if raw_timeout:
        try:
            timeout_ms = int(float(raw_timeout) * 1000)
        except ValueError as exc:
            raise ProviderUnavailableError(
                f"Invalid MOLTHOTEL_LLM_TIMEOUT_SECONDS: {raw_timeout}",
                error_code="invalid_timeout",
            ) from exc

    return ChatProviderConfig(
        provider=_provider_label(base_url),
        model=model,
        base_url=base_url.rstrip("/"),
        api_key=api_key,
        timeout_ms=max(200, timeout_ms),
    )


def _reply_text(content: Any) -> str:
    # Some gateways return content as a list of typed parts.
    if isinstance(content, list):
        return "".join(str(part.get("text") or "") for part in content if isinstance(part, dict))
    if content is None:
        return ""
    return str(content)


def _completion_request(
    config: ChatProviderConfig,
    messages: list[dict[str, str]],
    temperature: float,
    max_output_tokens: int,
) -> request.Request:
    body = json.dumps(
        {
            "model": config.model,
            "messages": messages,
            "temperature": float(temperature),
            "max_tokens": int(max_output_tokens),
        },
        separators=(",", ":"),
    ).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    return request.Request(f"{config.base_url}/chat/completions", data=body, headers=headers, method="POST")


def _fail(config: ChatProviderConfig, message: str, error_code: str) -> ProviderExecutionError:
    return ProviderExecutionError(message, error_code=error_code, model_name=config.model_name())


def _post_openai_compatible(
    *,
    config: ChatProviderConfig,
    messages: list[dict[str, str]],
    temperature: float,
    max_output_tokens: int,
) -> ProviderExecutionResult:
    req = _completion_request(config, messages, temperature, max_output_tokens)
    try:
        with request.urlopen(req, timeout=config.timeout_ms / 1000.0) as response:
            raw = response.read().decode("utf-8", errors="replace")
    except error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace") if exc.fp is not None else ""
        raise _fail(config, f"Chat backend answered HTTP {exc.code}: {body[:240]}", f"http_{exc.code}") from exc
    except (error.URLError, OSError) as exc:
        raise _fail(config, f"Chat backend unreachable: {exc}", "network_error") from exc

    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise _fail(config, "Chat backend returned non-JSON body", "invalid_provider_response") from exc
    if not isinstance(parsed, dict) or not parsed.get("choices"):
        raise _fail(config, "Chat backend response has no choices", "missing_choices")

    message = (parsed["choices"][0] or {}).get("message") or {}
    text = _reply_text(message.get("content")).strip()
    if not text:
        raise _fail(config, "Chat backend returned an empty line", "empty_response")

    usage = parsed.get("usage") or {}
    return ProviderExecutionResult(
        text=text,
        model_name=str(parsed.get("model") or config.model_name()),
        prompt_tokens=usage.get("prompt_tokens") if isinstance(usage.get("prompt_tokens"), int) else None,
        completion_tokens=usage.get("completion_tokens") if isinstance(usage.get("completion_tokens"), int) else None,
    )


def execute_chat_completion(
    *,
    messages: list[dict[str, str]],
    temperature: float,
    max_output_tokens: int,
) -> ProviderExecutionResult:
    """Run one chat completion against the configured backend."""
    return _post_openai_compatible(
        config=chat_provider_config(),
        messages=messages,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
    )
