"""Fernet-based credential resolver.

Credential blobs are Fernet tokens wrapping a JSON object, e.g.
``{"access_key": "...", "secret_key": "..."}`` for AWS or a service account
JSON document for GCP.
"""

import json
import os
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from kubeorch.core.config import CredentialsConfig
from kubeorch.core.exceptions import ConfigurationError, DecryptionFailedError
from kubeorch.interfaces.credential_resolver import CredentialResolver
from kubeorch.utils.logging import get_logger

logger = get_logger(__name__)


class FernetCredentialResolver(CredentialResolver):
    """Decrypts Fernet-encrypted JSON credential blobs."""

    def __init__(self, key: str | bytes):
        """Initialize resolver.

        Args:
            key: URL-safe base64 Fernet key

        Raises:
            ConfigurationError: If the key is not a valid Fernet key
        """
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid credential encryption key: {e}") from e

    @classmethod
    def from_config(cls, config: CredentialsConfig) -> "FernetCredentialResolver":
        """Create a resolver from configuration, falling back to the environment.

        Raises:
            ConfigurationError: If no key is configured
        """
        key = config.key or os.environ.get(config.key_env_var)
        if not key:
            raise ConfigurationError(
                f"No credential encryption key configured (set credentials.key "
                f"or {config.key_env_var})"
            )
        return cls(key)

    @staticmethod
    def generate_key() -> str:
        """Generate a new Fernet key."""
        return Fernet.generate_key().decode()

    def encrypt(self, credentials: dict[str, Any]) -> bytes:
        """Encrypt a credential map into a blob accepted by ``decrypt``."""
        return self._fernet.encrypt(json.dumps(credentials, sort_keys=True).encode())

    async def decrypt(self, blob: bytes) -> dict[str, Any]:
        if not blob:
            raise DecryptionFailedError("credential blob is empty")

        try:
            plaintext = self._fernet.decrypt(blob)
        except InvalidToken as e:
            logger.warning("credential_decryption_failed", blob_size=len(blob))
            raise DecryptionFailedError("credential blob could not be decrypted") from e

        try:
            data = json.loads(plaintext)
        except json.JSONDecodeError as e:
            raise DecryptionFailedError("decrypted credential is not valid JSON") from e

        if not isinstance(data, dict):
            raise DecryptionFailedError("decrypted credential is not a JSON object")

        return data
