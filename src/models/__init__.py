"""
Models package - Data models for the secret manager extension
"""

from .enums import (
    LifecycleEventType,
    LoopState,
    ShutdownStage,
    ExitCode,
    LogLevel,
    LogCategory,
)
from .events import LifecycleEvent
from .config import ExtensionConfig
from .secret import SecretLookupResult

__all__ = [
    'LifecycleEventType',
    'LoopState',
    'ShutdownStage',
    'ExitCode',
    'LogLevel',
    'LogCategory',
    'LifecycleEvent',
    'ExtensionConfig',
    'SecretLookupResult',
]
