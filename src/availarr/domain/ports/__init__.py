from .config_provider import ConfigProviderPort
from .endpoint_resolver import EndpointResolverPort
from .media_server import MediaServerPort, ProviderName
from .request_service import RequestServicePort

__all__ = [
    "ConfigProviderPort",
    "EndpointResolverPort",
    "MediaServerPort",
    "ProviderName",
    "RequestServicePort",
]
