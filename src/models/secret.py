"""
Secret lookup result

One of: string value, binary value, absent. Produced per request by
SecretService and never stored.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class SecretLookupResult:
    value: Optional[Union[str, bytes]] = None

    @classmethod
    def absent(cls) -> "SecretLookupResult":
        return cls(None)

    @classmethod
    def from_backend_response(cls, response: dict) -> "SecretLookupResult":
        """
        Pick the payload out of a GetSecretValue response.

        SecretString wins over SecretBinary; neither present means absent.
        """
        if response.get("SecretString"):
            return cls(response["SecretString"])
        if response.get("SecretBinary"):
            return cls(bytes(response["SecretBinary"]))
        return cls.absent()

    @property
    def is_absent(self) -> bool:
        return self.value is None

    @property
    def is_binary(self) -> bool:
        return isinstance(self.value, bytes)

    def to_json_value(self) -> Optional[str]:
        """JSON form: strings verbatim, bytes as base64 text, absent as None."""
        if isinstance(self.value, bytes):
            return base64.b64encode(self.value).decode("ascii")
        return self.value
