from .client_config import ClientConfig
from .logging_config import configure_logging

__all__ = ["ClientConfig", "configure_logging"]
