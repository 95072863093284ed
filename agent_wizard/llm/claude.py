"""Claude messages-API client with rate-limit aware retries.

Retry policy:
- rate limited (HTTP 429, a zero "remaining" header, or rate-limit wording in the error
  body) -> wait and retry, honouring ``Retry-After`` when the server sends it
- transport failure (connect/read error, undecodable body) -> wait and retry
- any other structured API error -> raise ``ApiError`` immediately

The wait blocks the calling thread. Passing a ``threading.Event`` lets another thread
abort the call while it waits.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import httpx

from agent_wizard.credentials import Credentials
from agent_wizard.errors import (
    ApiError,
    RateLimitError,
    RequestCancelledError,
    TransportError,
)
from agent_wizard.llm.base import BaseLLM
from agent_wizard.llm_config import LLMConfig

logger = logging.getLogger(__name__)

RATE_LIMIT_REMAINING_HEADERS = (
    "x-ratelimit-remaining",
    "anthropic-ratelimit-requests-remaining",
)
RATE_LIMIT_PHRASES = (
    "rate limit",
    "too many requests",
    "would exceed your organization's rate limit",
    "requests per minute",
    "token limit",
    "try again later",
)
RATE_LIMIT_TYPES = frozenset({"rate_limit_error", "tokens_exceeded", "quota_exceeded"})

# order matters: the bare fence must go last
_FENCE_MARKERS = ("```json", "```markdown", "```")


@dataclass
class ContentBlock:
    type: str
    text: str = ""


@dataclass
class ClaudeErrorBody:
    type: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> ClaudeErrorBody | None:
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if not isinstance(error, dict):
            return None
        return cls(type=error.get("type"), message=error.get("message"))


@dataclass
class ClaudeResponse:
    id: Optional[str] = None
    type: Optional[str] = None
    role: Optional[str] = None
    model: Optional[str] = None
    content: List[ContentBlock] = field(default_factory=list)
    stop_reason: Optional[str] = None
    error: Optional[ClaudeErrorBody] = None

    @classmethod
    def from_dict(cls, data: Any) -> ClaudeResponse:
        if not isinstance(data, dict):
            raise ValueError("Claude response must be a JSON object")
        blocks = [
            ContentBlock(type=str(block.get("type", "")), text=block.get("text") or "")
            for block in data.get("content") or []
            if isinstance(block, dict)
        ]
        return cls(
            id=data.get("id"),
            type=data.get("type"),
            role=data.get("role"),
            model=data.get("model"),
            content=blocks,
            stop_reason=data.get("stop_reason"),
            error=ClaudeErrorBody.from_payload(data),
        )

    def text_content(self) -> str:
        text = "\n".join(block.text for block in self.content if block.type == "text")
        return strip_code_fences(text)


def strip_code_fences(text: str) -> str:
    for marker in _FENCE_MARKERS:
        text = text.replace(marker, "")
    return text.strip()


def is_rate_limited(
    status_code: Optional[int],
    headers: Mapping[str, str] | None,
    error: Optional[ClaudeErrorBody],
) -> bool:
    if status_code == 429:
        return True
    if headers is not None:
        for name in RATE_LIMIT_REMAINING_HEADERS:
            if headers.get(name) == "0":
                return True
    if error is None:
        return False
    if error.message:
        message = error.message.lower()
        if any(phrase in message for phrase in RATE_LIMIT_PHRASES):
            return True
    return error.type in RATE_LIMIT_TYPES


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """``Retry-After`` seconds -> milliseconds; ``None`` when absent or not a whole number."""
    if value is None:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    if seconds < 0:
        return None
    return seconds * 1000


class ClaudeChatLLM(BaseLLM):
    def __init__(
        self,
        config: LLMConfig,
        *,
        credentials: Credentials | None = None,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(system_prompt=config.system_prompt)
        self._config = config
        self._credentials = credentials or Credentials()
        self._api_key = api_key
        self._transport = transport
        self._rng = rng or random.Random()
        self._timeout = httpx.Timeout(
            connect=config.connect_timeout_s,
            read=config.read_timeout_s,
            write=config.write_timeout_s,
            pool=config.connect_timeout_s,
        )

    @property
    def config(self) -> LLMConfig:
        return self._config

    def generate_messages(
        self,
        messages: List[Dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        return self.create_message(messages, cancel_event=cancel_event).text_content()

    def create_message(
        self,
        messages: List[Dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
    ) -> ClaudeResponse:
        """Send ``messages`` and return the decoded response (retrying as described above)."""
        self.validate_messages(messages)
        payload = {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens,
            "temperature": self._config.temperature,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
        }
        return self._post_with_retry(payload, cancel_event)

    def compute_retry_delay(self, attempt: int, retry_after_ms: Optional[int] = None) -> int:
        """Milliseconds to wait before retry number ``attempt + 1``.

        A server supplied ``Retry-After`` wins verbatim. Otherwise exponential backoff from
        the initial delay plus jitter below the initial delay, capped at the max delay.
        """
        if retry_after_ms is not None:
            return retry_after_ms
        initial = self._config.initial_retry_delay_ms
        base_delay = initial * (2**attempt)
        jitter = int(self._rng.random() * initial)
        return min(base_delay + jitter, self._config.max_retry_delay_ms)

    def _headers(self) -> Dict[str, str]:
        api_key = self._api_key or self._credentials.claude_api_key()
        headers = {
            "x-api-key": api_key,
            "anthropic-version": self._config.anthropic_version,
            "content-type": "application/json",
        }
        if self._config.beta:
            headers["anthropic-beta"] = self._config.beta
        return headers

    def _post_with_retry(
        self,
        payload: Dict[str, Any],
        cancel_event: Optional[threading.Event],
    ) -> ClaudeResponse:
        url = self._config.base_url
        headers = self._headers()
        max_retries = self._config.max_retries
        attempt = 0
        while True:
            logger.debug(f"Request URL: {url} (attempt {attempt + 1})")
            error: TransportError | RateLimitError
            try:
                with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                    response = client.post(url, json=payload, headers=headers)
            except httpx.HTTPError as exc:
                error = TransportError(f"Claude request failed: {exc}")
                error.__cause__ = exc
            else:
                self._log_response(response)
                if response.is_success:
                    try:
                        return ClaudeResponse.from_dict(response.json())
                    except ValueError as exc:
                        error = TransportError(
                            "Claude response was not valid JSON",
                            status_code=response.status_code,
                        )
                        error.__cause__ = exc
                else:
                    failure = self._classify_failure(response)
                    if not isinstance(failure, (RateLimitError, TransportError)):
                        logger.error(
                            f"Claude API error status={failure.status_code} "
                            f"type={failure.error_type}: {failure.message}"
                        )
                        raise failure
                    error = failure

            if attempt >= max_retries:
                logger.error(f"Claude request failed after {attempt + 1} attempts: {error}")
                raise error

            retry_after_ms = error.retry_after_ms if isinstance(error, RateLimitError) else None
            delay_ms = self.compute_retry_delay(attempt, retry_after_ms)
            reason = "Rate limit exceeded" if isinstance(error, RateLimitError) else "Request failed"
            logger.warning(
                f"{reason}, retrying in {delay_ms}ms (attempt {attempt + 1} of {max_retries})"
            )
            self._wait(delay_ms, cancel_event)
            attempt += 1

    def _classify_failure(
        self, response: httpx.Response
    ) -> RateLimitError | ApiError | TransportError:
        try:
            body: Any = response.json()
        except ValueError:
            body = None
        error_body = ClaudeErrorBody.from_payload(body)
        if is_rate_limited(response.status_code, response.headers, error_body):
            return RateLimitError(
                (error_body.message if error_body else None) or "Rate limit exceeded",
                error_body.type if error_body else None,
                response.status_code,
                retry_after_ms=parse_retry_after(response.headers.get("retry-after")),
            )
        if error_body is not None:
            return ApiError(error_body.message or "", error_body.type, response.status_code)
        return TransportError(
            f"API call failed: {response.status_code} - {response.reason_phrase}\n"
            f"Body: {response.text}",
            status_code=response.status_code,
        )

    def _wait(self, delay_ms: int, cancel_event: Optional[threading.Event]) -> None:
        seconds = max(delay_ms, 0) / 1000
        if cancel_event is None:
            if seconds > 0:
                time.sleep(seconds)
            return
        if cancel_event.wait(seconds):
            raise RequestCancelledError()

    def _log_response(self, response: httpx.Response) -> None:
        if not self._config.debug:
            return
        logger.info(f"Response Code: {response.status_code} {response.reason_phrase}")
        logger.info(f"Response Body: {response.text}")
