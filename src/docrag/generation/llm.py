"""Generation client — single place to swap chat providers.

The default chat model is ``ChatOpenAI`` pointed at ``settings.llm_base_url``.
Any OpenAI-compatible endpoint works, including Gemini's
``/v1beta/openai/`` endpoint and a local vLLM server.  Leave the base URL
empty to use the OpenAI cloud API.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from langchain_core.messages import HumanMessage

from docrag.config import settings
from docrag.errors import GenerationServiceError

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel
    from langchain_core.messages import BaseMessage
    from langchain_openai import ChatOpenAI

logger = logging.getLogger(__name__)


def get_llm(temperature: float | None = None) -> ChatOpenAI:
    """Return the configured chat model.

    When ``settings.llm_base_url`` is set the client is pointed at that
    OpenAI-compatible endpoint instead of the OpenAI cloud API.
    """
    from langchain_openai import ChatOpenAI

    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature if temperature is None else temperature,
    }

    if settings.llm_base_url:
        logger.info("Using chat endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # Local servers don't need a real key; the client requires a non-empty value.
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Encode *image_bytes* as a ``data:`` URL."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _message_text(content: Any) -> str:
    """Flatten chat-model message content into plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    raise GenerationServiceError(
        f"Generation service returned unsupported content of type {type(content).__name__}."
    )


class GenerationClient(ABC):
    """Produces answer text from a prompt.

    Implementations must raise :class:`GenerationServiceError` on provider
    failure or when no text comes back.
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's answer to *prompt*."""
        ...

    @abstractmethod
    async def generate_with_image(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        """Return the model's answer to *prompt* about the attached image."""
        ...


class LangChainGenerationClient(GenerationClient):
    """Adapter over any LangChain chat model.

    Parameters
    ----------
    llm:
        The chat model to call.  Defaults to :func:`get_llm`.
    """

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        self._llm = llm if llm is not None else get_llm()

    async def generate(self, prompt: str) -> str:
        return await self._invoke([HumanMessage(content=prompt)])

    async def generate_with_image(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        if not mime_type.startswith("image/"):
            raise ValueError(f"Expected an image MIME type, got {mime_type!r}")
        message = HumanMessage(
            content=[
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": to_data_url(image_bytes, mime_type)}},
            ]
        )
        return await self._invoke([message])

    async def _invoke(self, messages: list[BaseMessage]) -> str:
        try:
            response = await self._llm.ainvoke(messages)
        except Exception as exc:
            logger.warning("Generation request failed: %s", exc)
            raise GenerationServiceError(f"Generation request failed: {exc}") from exc

        text = _message_text(response.content)
        if not text.strip():
            raise GenerationServiceError("Generation service returned an empty response.")
        return text


def get_generation_client() -> GenerationClient:
    """Return the default generation client built from the global settings."""
    return LangChainGenerationClient(get_llm())
