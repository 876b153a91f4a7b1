"""ChadGPT - Claude API client (Anthropic Messages API).

Every failure is returned as a CompletionResult instead of raised, so a broken
backend never takes the dispatcher down with it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import httpx

from .models import CompletionRequest, CompletionResult

logger = logging.getLogger("chadgpt.claude")

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
# httpx's own default is 5s; generation routinely takes longer than that.
DEFAULT_TIMEOUT = httpx.Timeout(600.0, connect=10.0)


def _read_key_from_env_file(env_dir: Optional[Path] = None) -> str:
    if (os.environ.get("CHADGPT_TESTING") or "").strip() == "1":
        return ""
    env_path = (env_dir or Path.cwd()) / ".env"
    if not env_path.exists():
        return ""

    try:
        with open(env_path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line.startswith("ANTHROPIC_API_KEY="):
                    return line.split("=", 1)[1].strip().strip('"').strip("'")
    except OSError:
        return ""
    return ""


def get_api_key(configured: Optional[str] = None, env_dir: Optional[Path] = None) -> str:
    key = (configured or "").strip()
    if key:
        return key
    key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    if key:
        return key
    return _read_key_from_env_file(env_dir)


def _extract_claude_error(payload: dict) -> str:
    if not isinstance(payload, dict):
        return ""
    err = payload.get("error")
    if isinstance(err, dict):
        return str(err.get("message") or err.get("type") or "").strip()
    return str(payload.get("message") or "").strip()


def build_body(request: CompletionRequest) -> dict:
    """Translate a CompletionRequest into a Messages API body.

    System prompts travel in the top-level ``system`` field; the remaining
    messages keep their configured order. Sampling parameters left unset are
    omitted, everything else is sent as-is and validated by the backend.
    """
    system_parts: list[str] = []
    api_messages: list[dict] = []
    for msg in request.messages:
        if msg.role == "system":
            system_parts.append(msg.content)
            continue
        api_messages.append({"role": msg.role, "content": msg.content})

    body: dict = {
        "model": request.model,
        "max_tokens": request.max_tokens,
        "messages": api_messages,
    }
    if system_parts:
        body["system"] = "\n\n".join(system_parts)
    for name in ("temperature", "top_p", "frequency_penalty", "presence_penalty"):
        value = getattr(request, name)
        if value is not None:
            body[name] = value
    return body


class ClaudeClient:
    """Completion gateway bound to one API key and endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ):
        self.api_key = (api_key or "").strip()
        self.api_url = (api_url or "").strip() or DEFAULT_API_URL
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        if not self.api_key:
            logger.error("No Anthropic API key configured in config, environment or .env")
            return CompletionResult.failure("No Anthropic API key configured.")

        body = build_body(request)
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.api_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Claude API request failed: %s", exc)
            return CompletionResult.failure(str(exc) or type(exc).__name__)

        if resp.status_code != 200:
            try:
                detail = _extract_claude_error(resp.json())
            except ValueError:
                detail = str(resp.text or "").strip()[:280]
            logger.error("Claude API error %s: %s", resp.status_code, str(resp.text or "")[:300])
            return CompletionResult.failure(
                detail or f"HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError:
            logger.error("Claude returned invalid JSON: %s", str(resp.text or "")[:300])
            return CompletionResult.failure("invalid JSON in response", status_code=resp.status_code)

        content_blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content_blocks, list):
            logger.error("Claude response has no content list: %s", str(data)[:300])
            return CompletionResult.failure("malformed response body", status_code=resp.status_code)

        usage = data.get("usage") or {}
        logger.debug(
            "Claude usage: model=%s input=%s output=%s stop=%s",
            data.get("model") or request.model,
            usage.get("input_tokens"),
            usage.get("output_tokens"),
            data.get("stop_reason"),
        )
        text_parts = [
            str(block.get("text") or "")
            for block in content_blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        return CompletionResult.success(text_parts, status_code=resp.status_code)
