"""Google Gemini adapter built on the *google-genai* SDK.

Gemini conversations run as a chat session: every turn but the last becomes
``history`` and the last one is sent as the new message.  Roles map
``assistant`` -> ``model``; system messages become ``system_instruction``.
Because the new message must come from the user, a conversation ending on an
assistant turn is rejected before any network call.
"""

from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from aigateway.providers.base import BaseProviderAdapter, split_system
from aigateway.providers.catalog import GEMINI_MODELS
from aigateway.providers.errors import EmptyCompletionError, InvalidConversationShapeError
from aigateway.providers.models import (
    CompletionRequest,
    CompletionResponse,
    Message,
    TokenUsage,
)


def _to_content(message: Message) -> types.Content:
    role = "model" if message.role == "assistant" else "user"
    return types.Content(role=role, parts=[types.Part.from_text(text=message.content)])


def _extract_text(response: Any) -> str:
    """Concatenate the text parts of the first candidate.

    ``response.text`` is avoided on purpose: it warns on non-text parts and
    hides the difference between "no candidate" and "no text".
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(part.text for part in parts if getattr(part, "text", None))


def _finish_reason(response: Any) -> str | None:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    if reason is None:
        return None
    return str(getattr(reason, "value", reason))


def _usage(response: Any) -> TokenUsage | None:
    """Token counts from ``usage_metadata``; ``None`` unless both counts are reported."""
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return None
    prompt_tokens = getattr(metadata, "prompt_token_count", None)
    completion_tokens = getattr(metadata, "candidates_token_count", None)
    if prompt_tokens is None or completion_tokens is None:
        return None
    total_tokens = getattr(metadata, "total_token_count", None)
    if total_tokens is None:
        total_tokens = prompt_tokens + completion_tokens
    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
    )


class GeminiAdapter(BaseProviderAdapter):
    name = "gemini"
    models = GEMINI_MODELS

    def _create_client(self, api_key: str, timeout: float) -> genai.Client:
        # HttpOptions.timeout is expressed in milliseconds.
        return genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    def _validate(self, request: CompletionRequest) -> None:
        _, turns = split_system(request.messages)
        if not turns:
            raise InvalidConversationShapeError(
                "Gemini requires at least one user message", provider=self.name
            )
        if turns[-1].role != "user":
            raise InvalidConversationShapeError(
                "Gemini requires the last message to be from the user",
                provider=self.name,
            )

    def _start_chat(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> tuple[Any, str]:
        system, turns = split_system(request.messages)
        config = types.GenerateContentConfig(
            system_instruction=system,
            max_output_tokens=max_tokens,
            temperature=temperature,
        )
        chat = self._client.aio.chats.create(
            model=model,
            config=config,
            history=[_to_content(m) for m in turns[:-1]],
        )
        return chat, turns[-1].content

    async def _complete(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> CompletionResponse:
        chat, message = self._start_chat(request, model, max_tokens, temperature)
        response = await chat.send_message(message)

        content = _extract_text(response)
        if not content:
            raise EmptyCompletionError(
                "No text content in Gemini response", provider=self.name, model=model
            )

        return CompletionResponse(
            content=content,
            provider=self.name,
            model=model,
            usage=_usage(response),
            finish_reason=_finish_reason(response),
        )

    async def _stream_text(
        self,
        request: CompletionRequest,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> AsyncIterator[str]:
        chat, message = self._start_chat(request, model, max_tokens, temperature)
        async for chunk in await chat.send_message_stream(message):
            text = _extract_text(chunk)
            if text:
                yield text
