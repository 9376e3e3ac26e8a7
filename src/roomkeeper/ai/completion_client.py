"""
Text completion for AI replies in DMs and whispers.

Uses the AsyncOpenAI client against any OpenAI-compatible endpoint (OpenRouter
by default). :meth:`CompletionClient.complete` never raises: every failure is
logged and folded into the configured fallback reply.
"""

from __future__ import annotations

from openai import AsyncOpenAI

from roomkeeper.configuration.ai_settings import AISettings
from roomkeeper.util.logger import get_logger

logger = get_logger("completion_client")


class CompletionClient:
    """Single-prompt chat completion wrapper."""

    def __init__(self, ai_settings: AISettings, client: AsyncOpenAI | None = None) -> None:
        self.enabled = ai_settings.enabled
        self.model_name = ai_settings.model_name
        self.fallback_reply = ai_settings.fallback_reply
        self.max_tokens = ai_settings.max_tokens
        self._client = client

        if self._client is None and self.enabled:
            api_key = ai_settings.api_key
            if api_key:
                self._client = AsyncOpenAI(api_key=api_key, base_url=ai_settings.base_url)
                logger.info(
                    "[COMPLETION] Initialized with base_url=%s, model=%s", ai_settings.base_url, self.model_name
                )
            else:
                logger.warning(
                    "[COMPLETION] AI replies enabled but %s is not set; replies will use the fallback",
                    ai_settings.api_key_env,
                )

    @property
    def available(self) -> bool:
        return self.enabled and self._client is not None

    async def complete(self, prompt: str) -> str:
        if self._client is None:
            return self.fallback_reply

        kwargs = {}
        if self.max_tokens:
            kwargs["max_tokens"] = self.max_tokens
        try:
            response = await self._client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
            content = (response.choices[0].message.content or "").strip()
        except Exception as exc:
            logger.error("[COMPLETION] Request failed: %s", exc)
            return self.fallback_reply

        return content or self.fallback_reply

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
