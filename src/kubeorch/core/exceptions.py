"""Custom exceptions for kubeorch."""


class KubeorchError(Exception):
    """Base exception for all kubeorch errors."""


class ConfigurationError(KubeorchError):
    """Configuration-related errors."""


class UnsupportedProviderError(KubeorchError):
    """No driver is registered for the requested provider.

    Attributes:
        provider: Provider identifier that was requested
    """

    def __init__(self, provider: str):
        super().__init__(f"unsupported provider: {provider!r}")
        self.provider = provider


class DecryptionFailedError(KubeorchError):
    """Credential blob could not be decrypted."""


class InvalidCredentialError(KubeorchError):
    """Decrypted credential material is missing required fields.

    Attributes:
        provider: Provider the credential was meant for
        missing_keys: Keys absent from the decrypted map
    """

    def __init__(
        self, provider: str, missing_keys: list[str] | None = None, message: str | None = None
    ):
        self.provider = provider
        self.missing_keys = missing_keys or []
        if message is None:
            keys = ", ".join(self.missing_keys)
            message = f"{provider} credential is missing required keys: {keys}"
        super().__init__(message)


class MissingNetworkConfigError(KubeorchError):
    """Cluster spec has no network configuration."""


class MissingNodePoolConfigError(KubeorchError):
    """Cluster spec has no node pool but the provider requires one."""


class InvalidScalingConfigError(KubeorchError):
    """Scaling bounds violate 0 <= min <= desired <= max.

    Attributes:
        min_size: Requested minimum
        desired_size: Requested desired size
        max_size: Requested maximum
    """

    def __init__(self, message: str, min_size: int, desired_size: int, max_size: int):
        super().__init__(message)
        self.min_size = min_size
        self.desired_size = desired_size
        self.max_size = max_size


class NotFoundAnyLocationError(KubeorchError):
    """Resource was not found at any candidate location.

    Attributes:
        resource: Name of the resource looked up
        region: Region the candidates were derived from
        attempted: Locations tried, in order
        errors: Per-location failure messages
    """

    def __init__(
        self,
        resource: str,
        region: str,
        attempted: list[str],
        errors: dict[str, str] | None = None,
    ):
        tried = ", ".join(attempted)
        super().__init__(
            f"failed to find {resource} in region {region} or any of its zones "
            f"(tried: {tried})"
        )
        self.resource = resource
        self.region = region
        self.attempted = attempted
        self.errors = errors or {}


class ProviderAPIError(KubeorchError):
    """A provider SDK call failed.

    Attributes:
        provider: Provider identifier
        operation: Operation that was being performed
        location: Region or zone the call targeted
        resource: Resource name, if any
        error_code: Provider-native error code, if known
    """

    def __init__(
        self,
        message: str,
        provider: str,
        operation: str,
        location: str = "",
        resource: str = "",
        error_code: str | None = None,
    ):
        parts = [f"provider={provider}", f"operation={operation}"]
        if resource:
            parts.append(f"resource={resource}")
        if location:
            parts.append(f"location={location}")
        super().__init__(f"{message} ({', '.join(parts)})")
        self.provider = provider
        self.operation = operation
        self.location = location
        self.resource = resource
        self.error_code = error_code


class UnsupportedOperationError(ProviderAPIError):
    """Driver does not implement the requested operation."""

    def __init__(self, provider: str, operation: str, reason: str = "not implemented"):
        super().__init__(
            f"operation {operation} is not supported: {reason}",
            provider=provider,
            operation=operation,
            error_code="NotImplemented",
        )
        self.reason = reason
