from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for owner-scoped writes that bypass RLS

    # Clerk (identity provider)
    clerk_secret_key: Optional[str] = None
    clerk_issuer: Optional[str] = None  # e.g. https://clerk.your-domain.com; skipped when unset
    clerk_jwks_url: str = "https://api.clerk.com/v1/jwks"
    clerk_api_url: str = "https://api.clerk.com/v1"
    clerk_webhook_secret: Optional[str] = None
    clerk_webhook_tolerance_seconds: int = 300  # Svix timestamps older or newer than this are rejected

    # LLM gateway (OpenAI-compatible chat completions)
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    ai_gateway_api_key: Optional[str] = None
    ai_model: str = "google/gemini-2.5-flash"
    ai_timeout_seconds: float = 60.0

    # ElevenLabs conversational AI (outbound call campaigns)
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_api_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_timeout_seconds: float = 30.0

    # Feature tuning
    import_batch_size: int = 50
    context_actions_limit: int = 50
    context_pulse_limit: int = 30
    past_due_lockout_days: int = 7

    # App
    app_name: str = "pulse-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
