"""Credential resolver interface."""

from abc import ABC, abstractmethod
from typing import Any


class CredentialResolver(ABC):
    """Turns an opaque encrypted blob into provider credential material.

    Implementation Note:
    Returned material must only be held for the duration of one call and
    must never be logged.
    """

    @abstractmethod
    async def decrypt(self, blob: bytes) -> dict[str, Any]:
        """Decrypt a credential blob.

        Args:
            blob: Encrypted credential bytes

        Returns:
            Decrypted key/value map

        Raises:
            DecryptionFailedError: If the blob is empty, corrupt, or not a map
        """
