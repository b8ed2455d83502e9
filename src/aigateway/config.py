from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="ai-gateway")
    app_version: str = Field(default="0.1.0")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # "production" hides unclassified error details from response bodies
    environment: str = Field(default="development")

    # Observability
    otel_exporter_otlp_endpoint: str = Field(default="http://jaeger:4318")
    otel_service_name: str = Field(default="ai-gateway")
    log_level: str = Field(default="INFO")

    # Provider API keys, stored as SecretStr to avoid accidental logging.
    # Read once at startup; a missing key leaves that provider unconfigured.
    openai_api_key: SecretStr | None = Field(default=None)
    anthropic_api_key: SecretStr | None = Field(default=None)
    gemini_api_key: SecretStr | None = Field(default=None)

    # Routing
    default_provider: str = Field(default="openai")

    # LLM call behaviour
    llm_timeout: int = Field(default=60)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
