"""
Enums for the secret manager extension state machine
"""

from enum import Enum, IntEnum, auto


class LifecycleEventType(Enum):
    """Event tags delivered by the Extensions API /event/next call"""
    INVOKE = auto()
    SHUTDOWN = auto()
    UNKNOWN = auto()    # Any tag we did not subscribe to (or a malformed one)


class LoopState(Enum):
    """
    Extension event loop states

    STARTING → REGISTERED → POLLING → DISPATCHING → (POLLING | TERMINATING)
    """
    STARTING = auto()
    REGISTERED = auto()
    POLLING = auto()
    DISPATCHING = auto()
    TERMINATING = auto()


class ShutdownStage(Enum):
    """
    Process-wide shutdown progress, owned by ShutdownCoordinator

    RUNNING: normal operation
    DRAINING: shutdown claimed, lookup server closing, deadline armed
    STOPPED: shutdown fully completed
    """
    RUNNING = auto()
    DRAINING = auto()
    STOPPED = auto()


class ExitCode(IntEnum):
    """Process exit statuses reported to the host"""
    OK = 0
    FATAL = 1               # Config/registration failure or event loop crash
    SHUTDOWN_TIMEOUT = 2    # Graceful shutdown deadline exceeded


class LogLevel(Enum):
    """Log levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for structured logging"""
    CONFIG = auto()
    SYSTEM = auto()
    API = auto()
    LIFECYCLE = auto()
    EXTENSION = auto()
    SHUTDOWN = auto()
    SECRET = auto()
    CONSUMER = auto()
