"""
Lifecycle subsystem
-------------------

Exports the public API for:
- the extension event loop (register → poll → dispatch)
- graceful shutdown against a deadline
- the lookup server runner and shutdown handlers

External code should import from:
    from lifecycle import ExtensionEventLoop, ShutdownCoordinator
    from lifecycle.handlers import LookupServerShutdownHandler
"""

from .shutdown_coordinator import ShutdownCoordinator
from .shutdown_protocol import IShutdownHandler
from .lookup_server_wrapper import LookupServerWrapper
from .extension_loop import ExtensionEventLoop, RegistrationError
from . import handlers

__all__ = [
    "ShutdownCoordinator",
    "IShutdownHandler",
    "LookupServerWrapper",
    "ExtensionEventLoop",
    "RegistrationError",
    "handlers",
]
