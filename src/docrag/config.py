"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="API key for the chat provider")
    llm_model_name: str = Field(default="gemini-2.5-flash", description="Chat model identifier")
    llm_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        description=(
            "Base URL of an OpenAI-compatible chat endpoint. Leave empty to use "
            "the OpenAI cloud API."
        ),
    )
    llm_temperature: float = 0.0

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_concurrency: int = Field(default=4, ge=1, description="Max in-flight embedding calls")

    # Retrieval
    min_chunk_chars: int = Field(default=10, ge=1, description="Shortest paragraph kept as a chunk")
    top_k: int = Field(default=3, ge=1, description="Chunks placed in the prompt per question")

    # Uploads
    max_document_bytes: int = 2 * 1024 * 1024

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
