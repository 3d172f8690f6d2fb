"""Client Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can come from a BINDWIRE_* environment variable or .env
    - get_settings() is cached (lru_cache) — single instance per process
    - The pipeline only reads settings; nothing mutates them after construction

Design Decisions:
    - Latency reporting defaults to on, matching the service's expectation that
      clients report round-trip times on their next call
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Settings owned by one ItemService instance."""

    model_config = SettingsConfigDict(
        env_prefix="BINDWIRE_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Endpoint
    service_url: str = "https://localhost/items/service.json"
    timeout_seconds: float = Field(default=100.0, gt=0)
    user_agent: str = Field(default="bindwire/0.1", min_length=1)

    # Client latency reporting
    send_client_latencies: bool = True
    request_id_headers: list[str] = Field(
        default_factory=lambda: ["RequestId", "request-id"],
    )
    client_statistics_header: str = Field(default="X-ClientStatistics", min_length=1)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"
    configure_logging: bool = False

    @field_validator("request_id_headers")
    @classmethod
    def drop_blank_headers(cls, v: list[str]) -> list[str]:
        return [h.strip() for h in v if h and h.strip()]


@lru_cache
def get_settings() -> ClientSettings:
    return ClientSettings()
