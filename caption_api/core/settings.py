"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- Keeps provider endpoints, default prompts and host/port tunable without code changes.
"""

from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_MESSAGE = (
    "Generate a concise, yet detailed comma-separated caption. "
    "Do not use markdown. Do not have an intro or outro."
)
DEFAULT_USER_PROMPT = "Describe this image, focusing on the main elements, style, and composition."


class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API host/port
    host: str = Field(default="0.0.0.0", description="Bind address for FastAPI/Uvicorn")
    port: int = Field(default=8000, description="Port for FastAPI/Uvicorn")

    # CORS
    cors_allow_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed origins for browser apps"
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True, description="JSON logs; false for colored console output")

    # ---- Hosted provider (OpenAI) ----
    # OPENAI_API_KEY from .env or shell; a key sent with the form takes precedence
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: str = Field(default="gpt-5-nano")

    # ---- Local provider (Ollama) ----
    ollama_url: str = Field(default="http://localhost:11434")
    ollama_model: str = Field(default="", description="Default vision model, e.g. llava or moondream")

    # Per-image provider timeout (seconds); retries are left to the provider SDK
    request_timeout: float = Field(default=120.0)

    # ---- Caption defaults ----
    default_detail: str = Field(default="auto")     # "auto" | "low" | "high"
    default_system_message: str = Field(default=DEFAULT_SYSTEM_MESSAGE)
    default_user_prompt: str = Field(default=DEFAULT_USER_PROMPT)
    max_upload_images: int = Field(default=500, description="Cap on images per streamed batch")

    # ---- Download ----
    archive_filename: str = Field(default="captions.zip")


settings = Settings()
