"""Pydantic payloads accepted by the message endpoint."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from availarr.domain.entities import (
    DetectedMedia,
    DetectedMediaType,
    MediaServerSettings,
    RequestServiceSettings,
    ServerType,
    ServiceName,
    ServiceSettings,
    UpstreamMediaType,
    build_detected_media,
)
from availarr.domain.entities.endpoints import strip_trailing_slashes

MessageType = Literal[
    "CHECK_MEDIA",
    "REQUEST_MEDIA",
    "SEARCH_MEDIA",
    "TEST_CONNECTION",
    "GET_CONFIG",
    "SAVE_CONFIG",
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _optional_id(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


class MessageEnvelope(BaseModel):
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


class MediaPayload(_CamelModel):
    """CHECK_MEDIA / REQUEST_MEDIA payload."""

    title: str = ""
    media_type: DetectedMediaType = Field(alias="mediaType")
    year: Optional[Union[int, str]] = None
    imdb_id: Optional[str] = Field(default=None, alias="imdbId")
    tmdb_id: Optional[str] = Field(default=None, alias="tmdbId")
    season_number: Optional[int] = Field(default=None, alias="seasonNumber")
    episode_number: Optional[int] = Field(default=None, alias="episodeNumber")

    @field_validator("imdb_id", "tmdb_id", mode="before")
    @classmethod
    def _normalize_ids(cls, v: Any) -> Any:
        return _optional_id(v)

    def to_detected(self) -> DetectedMedia:
        return build_detected_media(
            media_type=self.media_type,
            title=self.title,
            year=self.year,
            imdb_id=self.imdb_id,
            tmdb_id=self.tmdb_id,
            season_number=self.season_number,
            episode_number=self.episode_number,
        )


class SearchPayload(_CamelModel):
    query: str = ""
    media_type: Optional[UpstreamMediaType] = Field(default=None, alias="mediaType")
    year: Optional[Union[int, str]] = None


class ConnectionTestPayload(_CamelModel):
    service: ServiceName


class MediaServerPayload(_CamelModel):
    server_type: ServerType = Field(default="emby", alias="serverType")
    url: str = ""
    local_url: str = Field(default="", alias="localUrl")
    api_key: str = Field(default="", alias="apiKey")

    @field_validator("url", "local_url", mode="before")
    @classmethod
    def _strip_urls(cls, v: Any) -> str:
        return strip_trailing_slashes(v)


class RequestServicePayload(_CamelModel):
    enabled: bool = False
    url: str = ""
    local_url: str = Field(default="", alias="localUrl")
    api_key: str = Field(default="", alias="apiKey")

    @field_validator("url", "local_url", mode="before")
    @classmethod
    def _strip_urls(cls, v: Any) -> str:
        return strip_trailing_slashes(v)


class ConfigPayload(_CamelModel):
    """SAVE_CONFIG payload; the same shape is returned by GET_CONFIG."""

    media_server: MediaServerPayload = Field(
        default_factory=MediaServerPayload, alias="mediaServer"
    )
    request_service: RequestServicePayload = Field(
        default_factory=RequestServicePayload, alias="requestService"
    )

    def to_settings(self) -> ServiceSettings:
        ms = self.media_server
        rs = self.request_service
        return ServiceSettings(
            media_server=MediaServerSettings(
                server_type=ms.server_type,
                url=ms.url,
                local_url=ms.local_url,
                api_key=ms.api_key,
            ),
            request_service=RequestServiceSettings(
                enabled=rs.enabled,
                url=rs.url,
                local_url=rs.local_url,
                api_key=rs.api_key,
            ),
        )
