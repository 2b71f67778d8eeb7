from __future__ import annotations

from .load import load_config
from .provider import InMemoryConfigProvider
from .schema import AppConfig, EnvOverrides

__all__ = ["AppConfig", "EnvOverrides", "InMemoryConfigProvider", "load_config"]
