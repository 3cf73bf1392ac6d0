from .lifecycle_client_shutdown_handler import LifecycleClientShutdownHandler
from .lookup_server_shutdown_handler import LookupServerShutdownHandler

__all__ = [
    "LifecycleClientShutdownHandler",
    "LookupServerShutdownHandler",
]
