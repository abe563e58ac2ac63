# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# All runtime configuration is declared on one `BaseSettings` model.
#
# HOW IT WORKS:
# Pydantic Settings loads values in this priority order (highest first):
#   1. Environment variables (e.g., `GEMINI_API_KEY=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# USAGE:
#   from app.config import settings
#   print(settings.llm_provider)
# =============================================================================

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults are suitable for local development. API keys have no usable
    default and must come from the environment or a .env file.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "Holographic Assistant"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    # Browser UI (avatar, index.html) is served from here when it exists.
    static_dir: str = "public"
    cors_origins: list[str] = ["*"]

    # -------------------------------------------------------------------------
    # Persona
    # -------------------------------------------------------------------------
    assistant_name: str = "Jarvis"

    # -------------------------------------------------------------------------
    # Chat Completion — Multi-Provider
    # -------------------------------------------------------------------------
    # Providers:
    #   - "gemini": Google Generative Language REST API (default)
    #   - "anthropic": Claude via native Anthropic SDK
    #   - "openai_compatible": Any OpenAI-compatible API
    #
    # Example configs:
    #   Gemini:    provider=gemini, model=gemini-2.0-flash
    #   Claude:    provider=anthropic, model=claude-sonnet-4-6
    #   DeepSeek:  provider=openai_compatible, base_url=https://api.deepseek.com/v1, model=deepseek-chat
    # -------------------------------------------------------------------------
    llm_provider: str = "gemini"  # "gemini", "anthropic" or "openai_compatible"
    llm_model: str = "gemini-2.0-flash"
    llm_base_url: str | None = None  # Only needed for openai_compatible
    llm_api_key: str | None = None   # Overrides provider-specific key if set
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1024

    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # Applies to every outbound call (chat and speech). No retries.
    upstream_timeout_seconds: float = 30.0

    # -------------------------------------------------------------------------
    # Document Context
    # -------------------------------------------------------------------------
    # Each stored document contributes at most this many characters to the
    # prompt. Acts as a rough token budget per document.
    # -------------------------------------------------------------------------
    context_max_chars: int = 1500

    # PDF extraction reads the embedded text layer only unless OCR is on.
    # Table structure recognition is always on.
    pdf_ocr_enabled: bool = False

    # -------------------------------------------------------------------------
    # Speech Synthesis — Google Cloud Text-to-Speech
    # -------------------------------------------------------------------------
    google_tts_api_key: str = ""
    tts_base_url: str = "https://texttospeech.googleapis.com/v1"
    tts_voice_name: str = "en-US-Standard-C"
    tts_max_chars: int = 1000
    tts_audio_encoding: str = "MP3"
    tts_speaking_rate: float = 1.0
    tts_pitch: float = 0.0

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Allow extra fields in environment (don't crash on unknown vars)
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    In tests, override with FastAPI's dependency_overrides:
        app.dependency_overrides[get_settings] = lambda: Settings(debug=True)
    """
    return Settings()


# ---------------------------------------------------------------------------
# Module-level convenience instance
# ---------------------------------------------------------------------------
settings = get_settings()
