"""
main_asyncio.py - Entry point for the secret manager extension
---------------------------------------------------------------

Responsible for:
- loading configuration
- wiring dependencies (lookup service, Extensions API client, shutdown)
- running the extension event loop
- translating the outcome into the process exit status
    0  graceful shutdown
    1  fatal error (configuration, registration, event loop)
    2  shutdown deadline exceeded (raised from ShutdownCoordinator via os._exit)
"""

import asyncio
import sys

from api.main import create_app
from api.dependencies import set_secret_service
from lifecycle import ExtensionEventLoop, LookupServerWrapper, ShutdownCoordinator
from lifecycle.handlers import LifecycleClientShutdownHandler, LookupServerShutdownHandler
from managers import ConfigManager, ConfigError
from models.enums import ExitCode, LogCategory
from services import LifecycleClient, SecretService, SecretsManagerBackend
from utils.logger import get_logger, configure_logger, parse_level

log = get_logger().for_category(LogCategory.SYSTEM)


async def main() -> ExitCode:
    """Main async entry point (dependency injection and event loop startup)."""

    try:
        config = ConfigManager().load()
    except ConfigError as e:
        log.error(f"Fatal error: {e}")
        return ExitCode.FATAL

    configure_logger(parse_level(config.log_level), use_colors=sys.stdout.isatty())

    log.info("Starting secret manager extension...", extension_name=config.extension_name)

    # ========================================================================
    # 1. LOOKUP SERVICE
    # ========================================================================

    set_secret_service(SecretService(SecretsManagerBackend(region_name=config.aws_region)))
    lookup_server = LookupServerWrapper(
        create_app(),
        host=config.lookup_host,
        port=config.lookup_port,
    )

    # ========================================================================
    # 2. EXTENSIONS API CLIENT
    # ========================================================================

    client = LifecycleClient(config.extensions_api_url, config.extension_name)

    # ========================================================================
    # 3. SHUTDOWN COORDINATOR
    # ========================================================================

    coordinator = ShutdownCoordinator(deadline=config.shutdown_deadline)
    coordinator.register(LookupServerShutdownHandler(lookup_server))
    coordinator.register(LifecycleClientShutdownHandler(client))

    # ========================================================================
    # 4. EVENT LOOP
    # ========================================================================

    event_loop = ExtensionEventLoop(client, coordinator, lookup_server)
    return await event_loop.run()


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------
def run() -> None:
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        # SIGINT before signal handlers were installed
        log.info("Keyboard interrupt received")
        exit_code = ExitCode.OK
    sys.exit(int(exit_code))


if __name__ == "__main__":
    run()
