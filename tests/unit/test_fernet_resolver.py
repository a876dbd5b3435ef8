"""Unit tests for the Fernet credential resolver."""

import json

import pytest
from cryptography.fernet import Fernet

from kubeorch.core.config import CredentialsConfig
from kubeorch.core.exceptions import ConfigurationError, DecryptionFailedError
from kubeorch.security.fernet_resolver import FernetCredentialResolver


@pytest.fixture
def key() -> str:
    """Fresh Fernet key."""
    return FernetCredentialResolver.generate_key()


@pytest.fixture
def resolver(key: str) -> FernetCredentialResolver:
    """Resolver for the fresh key."""
    return FernetCredentialResolver(key)


class TestConstruction:
    """Tests for resolver construction."""

    def test_invalid_key(self) -> None:
        """Test malformed keys are a configuration error."""
        with pytest.raises(ConfigurationError):
            FernetCredentialResolver("not-a-key")

    def test_from_config_key(self, key: str) -> None:
        """Test the configured key is used."""
        resolver = FernetCredentialResolver.from_config(CredentialsConfig(key=key))

        assert isinstance(resolver, FernetCredentialResolver)

    def test_from_config_env(self, key: str, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the key falls back to the environment variable."""
        monkeypatch.setenv("TEST_KUBEORCH_KEY", key)

        resolver = FernetCredentialResolver.from_config(
            CredentialsConfig(key_env_var="TEST_KUBEORCH_KEY")
        )

        assert isinstance(resolver, FernetCredentialResolver)

    def test_from_config_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a missing key is reported with the variable name."""
        monkeypatch.delenv("TEST_KUBEORCH_KEY", raising=False)

        with pytest.raises(ConfigurationError, match="TEST_KUBEORCH_KEY"):
            FernetCredentialResolver.from_config(
                CredentialsConfig(key_env_var="TEST_KUBEORCH_KEY")
            )


class TestDecrypt:
    """Tests for decrypt."""

    @pytest.mark.asyncio
    async def test_encrypt_then_decrypt(
        self, resolver: FernetCredentialResolver, aws_credentials: dict
    ) -> None:
        """Test a blob produced by encrypt decrypts to the same map."""
        blob = resolver.encrypt(aws_credentials)

        assert await resolver.decrypt(blob) == aws_credentials

    @pytest.mark.asyncio
    async def test_empty_blob(self, resolver: FernetCredentialResolver) -> None:
        """Test empty blobs are rejected."""
        with pytest.raises(DecryptionFailedError, match="empty"):
            await resolver.decrypt(b"")

    @pytest.mark.asyncio
    async def test_wrong_key(self, resolver: FernetCredentialResolver) -> None:
        """Test blobs encrypted with another key are rejected."""
        other = FernetCredentialResolver(Fernet.generate_key())
        blob = other.encrypt({"access_key": "a"})

        with pytest.raises(DecryptionFailedError):
            await resolver.decrypt(blob)

    @pytest.mark.asyncio
    async def test_garbage(self, resolver: FernetCredentialResolver) -> None:
        """Test non-token bytes are rejected."""
        with pytest.raises(DecryptionFailedError):
            await resolver.decrypt(b"garbage")

    @pytest.mark.asyncio
    async def test_not_json(self, key: str, resolver: FernetCredentialResolver) -> None:
        """Test plaintext that is not JSON is rejected."""
        blob = Fernet(key).encrypt(b"not json")

        with pytest.raises(DecryptionFailedError, match="JSON"):
            await resolver.decrypt(blob)

    @pytest.mark.asyncio
    async def test_not_object(self, key: str, resolver: FernetCredentialResolver) -> None:
        """Test JSON that is not an object is rejected."""
        blob = Fernet(key).encrypt(json.dumps(["a", "b"]).encode())

        with pytest.raises(DecryptionFailedError, match="object"):
            await resolver.decrypt(blob)

    @pytest.mark.asyncio
    async def test_error_does_not_leak_plaintext(
        self, key: str, resolver: FernetCredentialResolver
    ) -> None:
        """Test error messages never include decrypted content."""
        blob = Fernet(key).encrypt(b'"secret-value"')

        with pytest.raises(DecryptionFailedError) as exc_info:
            await resolver.decrypt(blob)

        assert "secret-value" not in str(exc_info.value)
