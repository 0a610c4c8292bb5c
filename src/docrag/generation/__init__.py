"""
Generation — prompt assembly and the chat-model boundary.

Public API
----------
- :func:`assemble_prompt` — merge retrieved context with a question.
- :class:`GenerationClient` — abstract answer generator.
- :class:`LangChainGenerationClient` — adapter over any LangChain chat model.
"""

from docrag.generation.llm import GenerationClient, LangChainGenerationClient, get_generation_client
from docrag.generation.prompts import CONTEXT_SEPARATOR, assemble_prompt

__all__ = [
    "CONTEXT_SEPARATOR",
    "GenerationClient",
    "LangChainGenerationClient",
    "assemble_prompt",
    "get_generation_client",
]
