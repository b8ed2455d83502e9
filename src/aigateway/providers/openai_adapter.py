"""OpenAI Chat Completions adapter.

System messages stay inline in the ``messages`` list, which is the shape the
Chat Completions API expects.
"""

from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from aigateway.providers.base import BaseProviderAdapter
from aigateway.providers.catalog import OPENAI_MODELS
from aigateway.providers.errors import EmptyCompletionError
from aigateway.providers.models import CompletionRequest, CompletionResponse, TokenUsage


class OpenAIAdapter(BaseProviderAdapter):
    name = "openai"
    models = OPENAI_MODELS

    def _create_client(self, api_key: str, timeout: float) -> AsyncOpenAI:
        # max_retries=0: the gateway calls the upstream exactly once.
        return AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def _to_openai_params(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

    async def _complete(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> CompletionResponse:
        params = self._to_openai_params(request, model, max_tokens, temperature)
        response = await self._client.chat.completions.create(**params)

        choice = response.choices[0] if response.choices else None
        content = choice.message.content if choice is not None else None
        if not content:
            raise EmptyCompletionError(
                "No text content in OpenAI response", provider=self.name, model=model
            )

        usage: TokenUsage | None = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return CompletionResponse(
            content=content,
            provider=self.name,
            model=model,
            usage=usage,
            finish_reason=choice.finish_reason,
        )

    async def _stream_text(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]:
        params = self._to_openai_params(request, model, max_tokens, temperature)
        stream = await self._client.chat.completions.create(stream=True, **params)
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            text = getattr(delta, "content", None) if delta is not None else None
            if text:
                yield text
