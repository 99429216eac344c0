"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "GupAI"
    app_version: str = "1.0.0"
    assistant_name: str = "GupAI"
    debug: bool = False

    # Local store
    local_storage_path: str = "./data"
    export_dir: str = "./exports"

    # Completion provider (client side)
    provider_base_url: str = "http://localhost:8000"
    provider_health_path: str = "/api/health"
    provider_chat_path: str = "/api/chat"
    provider_health_timeout: float = 5.0  # seconds
    provider_chat_timeout: float = 60.0  # seconds
    backend_label: str = "Python"

    # Completion provider (server stub)
    backend_mode: str = "echo"  # "echo" or "openai"

    # LLM Provider settings (used by the "openai" stub mode)
    llm_provider: str = "openai"
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # uses provider default if not set
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_system_prompt: str = "You are a helpful AI assistant."
    llm_max_tokens: int = 500
    llm_temperature: float = 0.7

    # Legacy key (still accepted)
    openai_api_key: Optional[str] = None

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/gupai.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses
    log_llm_calls: bool = True  # Log all LLM calls with token usage

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
