from .errors import ConfigError
from .loader import load_config
from .models import AppConfig, ClientConfig, ServerConfig

__all__ = [
    "AppConfig",
    "ClientConfig",
    "ConfigError",
    "ServerConfig",
    "load_config",
]
