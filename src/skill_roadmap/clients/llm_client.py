"""Claude API wrapper used for skill extraction and transfer analysis."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass

import anthropic
from tenacity import retry, stop_after_attempt, wait_exponential

from skill_roadmap.config import LLMConfig
from skill_roadmap.errors import LLMResponseError
from skill_roadmap.utils.json_parser import extract_json_object

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


@dataclass
class LLMResponse:
    """Response text plus token usage."""

    text: str
    input_tokens: int
    output_tokens: int


@dataclass
class TokenUsage:
    model: str
    purpose: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Claude client. Transient API errors are retried with backoff.

    Every call is tagged with a purpose ("skill_extraction",
    "transfer_analysis", ...) so a pipeline run can report where its
    tokens went.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        model: str = DEFAULT_MODEL,
    ):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self.model = model
        self._usage: list[TokenUsage] = []

    @classmethod
    def from_config(cls, config: LLMConfig) -> LLMClient | None:
        """Client for ``config``, or None when disabled or no API key is set."""
        if not config.enabled:
            return None
        if not os.environ.get("ANTHROPIC_API_KEY"):
            logger.info("ANTHROPIC_API_KEY not set; LLM-assisted steps disabled")
            return None
        return cls(timeout=config.timeout, model=config.model)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        reraise=True,
    )
    async def _call_api(self, **kwargs) -> anthropic.types.Message:
        return await self.client.messages.create(**kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        purpose: str = "general",
    ) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage."""
        model = model or self.model
        request: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system

        logger.debug("LLM call [%s]: model=%s, %d prompt chars", purpose, model, len(prompt))
        try:
            message = await self._call_api(**request)
        except anthropic.APIError:
            logger.error("LLM call [%s] failed", purpose, exc_info=True)
            raise

        usage = TokenUsage(
            model=model,
            purpose=purpose,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )
        self._usage.append(usage)
        logger.debug(
            "LLM response [%s]: %d input, %d output tokens",
            purpose, usage.input_tokens, usage.output_tokens,
        )
        text = "".join(getattr(block, "text", "") for block in message.content)
        return LLMResponse(text=text, input_tokens=usage.input_tokens, output_tokens=usage.output_tokens)

    async def generate_json(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        max_tokens: int = 4096,
        purpose: str = "general",
        required_keys: Iterable[str] = (),
    ) -> dict:
        """Send a prompt and return the first JSON object in the reply.

        Raises LLMResponseError when the reply holds no JSON object or the
        object lacks any of ``required_keys``.
        """
        response = await self.generate(
            prompt=prompt,
            system=system,
            model=model,
            max_tokens=max_tokens,
            purpose=purpose,
        )
        data = extract_json_object(response.text)
        missing = [key for key in required_keys if key not in data]
        if missing:
            raise LLMResponseError(f"LLM reply for {purpose} is missing keys: {', '.join(missing)}")
        return data

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset it.

        ``calls`` holds ``(model, input_tokens, output_tokens)`` tuples for
        cost estimation; ``by_purpose`` totals tokens per call purpose.
        """
        by_purpose: dict[str, dict[str, int]] = {}
        for u in self._usage:
            totals = by_purpose.setdefault(u.purpose, {"input": 0, "output": 0, "calls": 0})
            totals["input"] += u.input_tokens
            totals["output"] += u.output_tokens
            totals["calls"] += 1
        summary = {
            "input": sum(u.input_tokens for u in self._usage),
            "output": sum(u.output_tokens for u in self._usage),
            "calls": [(u.model, u.input_tokens, u.output_tokens) for u in self._usage],
            "by_purpose": by_purpose,
        }
        self._usage.clear()
        return summary
