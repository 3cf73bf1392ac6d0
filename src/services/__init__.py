"""Services layer"""

from .lifecycle_client import LifecycleClient
from .secret_service import SecretService, SecretsManagerBackend, SecretBackendError, ISecretBackend

__all__ = [
    "LifecycleClient",
    "SecretService",
    "SecretsManagerBackend",
    "SecretBackendError",
    "ISecretBackend",
]
