"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from availarr.domain.entities.endpoints import (
    MediaServerSettings,
    RequestServiceSettings,
    ServerType,
    ServiceSettings,
    strip_trailing_slashes,
)

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_url(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"Expected URL string, got: {type(value)!r}")
    return strip_trailing_slashes(value)


class MediaServerConfig(BaseModel):
    """Emby/Jellyfin connection (YAML section: media_server.*)."""

    server_type: ServerType = Field(
        default="emby", description="Media server family: 'emby' or 'jellyfin'."
    )
    url: str = Field(default="", description="Public URL of the media server.")
    local_url: str = Field(
        default="", description="Optional LAN URL, preferred when reachable."
    )
    api_key: str = Field(default="", description="Media server API key.")

    @field_validator("server_type", mode="before")
    @classmethod
    def _lower_server_type(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("url", "local_url", mode="before")
    @classmethod
    def _validate_urls(cls, v: Any) -> str:
        return _normalize_url(v)

    def to_settings(self) -> MediaServerSettings:
        return MediaServerSettings(
            server_type=self.server_type,
            url=self.url,
            local_url=self.local_url,
            api_key=self.api_key,
        )


class RequestServiceConfig(BaseModel):
    """Jellyseerr/Overseerr connection (YAML section: request_service.*)."""

    enabled: bool = Field(default=False, description="Enable request features.")
    url: str = Field(default="", description="Public URL of the request service.")
    local_url: str = Field(
        default="", description="Optional LAN URL, preferred when reachable."
    )
    api_key: str = Field(default="", description="Request service API key.")

    @field_validator("url", "local_url", mode="before")
    @classmethod
    def _validate_urls(cls, v: Any) -> str:
        return _normalize_url(v)

    def to_settings(self) -> RequestServiceSettings:
        return RequestServiceSettings(
            enabled=self.enabled,
            url=self.url,
            local_url=self.local_url,
            api_key=self.api_key,
        )


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/endpoints/search/logging/
      media_server/request_service).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="availarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout in seconds for media server and request service calls.",
    )
    http_user_agent: str = Field(
        default="Availarr/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Endpoint resolution (YAML section: endpoints.*)
    probe_timeout_seconds: float = Field(
        default=3.0,
        validation_alias=AliasChoices(
            "probe_timeout_seconds",
            AliasPath("endpoints", "probe_timeout_seconds"),
        ),
        description="Timeout for the local-URL reachability probe.",
    )
    endpoint_cache_ttl_seconds: float = Field(
        default=300,
        validation_alias=AliasChoices(
            "endpoint_cache_ttl_seconds",
            AliasPath("endpoints", "cache_ttl_seconds"),
        ),
        description="How long a probe outcome is reused (seconds).",
    )

    # Search enrichment (YAML section: search.*)
    server_resolve_timeout_seconds: float = Field(
        default=4.0,
        validation_alias=AliasChoices(
            "server_resolve_timeout_seconds",
            AliasPath("search", "server_resolve_timeout_seconds"),
        ),
        description="Bound on resolving the media server URL during a search.",
    )
    enrichment_timeout_seconds: float = Field(
        default=5.0,
        validation_alias=AliasChoices(
            "enrichment_timeout_seconds",
            AliasPath("search", "enrichment_timeout_seconds"),
        ),
        description="Bound on each per-result media server lookup.",
    )
    max_candidates: int = Field(
        default=5,
        validation_alias=AliasChoices(
            "max_candidates",
            AliasPath("search", "max_candidates"),
        ),
        description="Maximum candidates kept after narrowing.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    media_server: MediaServerConfig = Field(default_factory=MediaServerConfig)
    request_service: RequestServiceConfig = Field(
        default_factory=RequestServiceConfig
    )

    @field_validator(
        "http_timeout_seconds",
        "probe_timeout_seconds",
        "server_resolve_timeout_seconds",
        "enrichment_timeout_seconds",
    )
    @classmethod
    def _validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("endpoint_cache_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: float) -> float:
        if v < 0:
            raise ValueError("endpoint_cache_ttl_seconds must be >= 0")
        return v

    @field_validator("max_candidates")
    @classmethod
    def _validate_max_candidates(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_candidates must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_service_settings(self) -> ServiceSettings:
        """Snapshot of both services' connection settings."""
        return ServiceSettings(
            media_server=self.media_server.to_settings(),
            request_service=self.request_service.to_settings(),
        )


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read AVAILARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - AVAILARR_MEDIA_SERVER_URL
    - AVAILARR_MEDIA_SERVER_API_KEY
    - AVAILARR_REQUEST_SERVICE_ENABLED
    - AVAILARR_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="AVAILARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    probe_timeout_seconds: Optional[float] = None
    endpoint_cache_ttl_seconds: Optional[float] = None

    server_resolve_timeout_seconds: Optional[float] = None
    enrichment_timeout_seconds: Optional[float] = None
    max_candidates: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    media_server_type: Optional[str] = None
    media_server_url: Optional[str] = None
    media_server_local_url: Optional[str] = None
    media_server_api_key: Optional[str] = None

    request_service_enabled: Optional[bool] = None
    request_service_url: Optional[str] = None
    request_service_local_url: Optional[str] = None
    request_service_api_key: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
