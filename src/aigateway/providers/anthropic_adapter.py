"""Anthropic Messages API adapter.

System instructions are lifted out of the conversation into the dedicated
``system`` field; the remaining turns are sent as ``messages``.
"""

from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from aigateway.providers.base import BaseProviderAdapter, split_system
from aigateway.providers.catalog import ANTHROPIC_MODELS
from aigateway.providers.errors import EmptyCompletionError
from aigateway.providers.models import CompletionRequest, CompletionResponse, TokenUsage


class AnthropicAdapter(BaseProviderAdapter):
    name = "anthropic"
    models = ANTHROPIC_MODELS

    def _create_client(self, api_key: str, timeout: float) -> AsyncAnthropic:
        return AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def _to_anthropic_params(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> dict[str, Any]:
        system, turns = split_system(request.messages)
        params: dict[str, Any] = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in turns],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system is not None:
            params["system"] = system
        return params

    async def _complete(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> CompletionResponse:
        params = self._to_anthropic_params(request, model, max_tokens, temperature)
        response = await self._client.messages.create(**params)

        # Only text blocks count; tool_use and other block types are skipped.
        content = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not content:
            raise EmptyCompletionError(
                "No text content in Anthropic response", provider=self.name, model=model
            )

        usage: TokenUsage | None = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            )

        return CompletionResponse(
            content=content,
            provider=self.name,
            model=model,
            usage=usage,
            finish_reason=response.stop_reason,
        )

    async def _stream_text(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]:
        params = self._to_anthropic_params(request, model, max_tokens, temperature)
        async with self._client.messages.stream(**params) as stream:
            async for text in stream.text_stream:
                yield text
