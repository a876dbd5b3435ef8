"""Configuration management for kubeorch."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from kubeorch.core.exceptions import ConfigurationError


class LocationConfig(BaseModel):
    """Candidate location derivation for providers with zonal resources."""

    zone_suffixes: list[str] = Field(default_factory=lambda: ["a", "b", "c"])
    parallel_enumeration: bool = False

    @field_validator("zone_suffixes")
    @classmethod
    def suffixes_not_blank(cls, v: list[str]) -> list[str]:
        """Reject empty suffixes, which would duplicate the region itself."""
        if any(not s.strip() for s in v):
            raise ValueError("zone suffixes must be non-empty strings")
        return v


class TimeoutConfig(BaseModel):
    """Timeouts in seconds."""

    operation_seconds: float = 120.0
    connect_seconds: float = 10.0
    read_seconds: float = 60.0


class AWSConfig(BaseModel):
    """AWS EKS configuration."""

    authentication_mode: str = "API"
    bootstrap_cluster_creator_admin_permissions: bool = True
    cli_command: str = "aws"
    metadata_region: str = "us-east-1"


class GCPConfig(BaseModel):
    """GCP GKE configuration."""

    auth_plugin_command: str = "gke-gcloud-auth-plugin"
    auth_plugin_install_hint: str = (
        "Install gke-gcloud-auth-plugin for use with kubectl by following "
        "https://cloud.google.com/kubernetes-engine/docs/how-to/cluster-access-for-kubectl"
        "#install_plugin"
    )


class CredentialsConfig(BaseModel):
    """Credential resolver configuration."""

    key: str | None = None
    key_env_var: str = "KUBEORCH_CREDENTIAL_KEY"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    output: str = "stdout"


class KubeorchConfig(BaseModel):
    """Main kubeorch configuration."""

    locations: LocationConfig = Field(default_factory=LocationConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    aws: AWSConfig = Field(default_factory=AWSConfig)
    gcp: GCPConfig = Field(default_factory=GCPConfig)
    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "KubeorchConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            KubeorchConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
