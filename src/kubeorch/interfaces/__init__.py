"""Interface definitions for kubeorch."""

from kubeorch.interfaces.cluster_driver import ClusterDriver, Credentials
from kubeorch.interfaces.credential_resolver import CredentialResolver

__all__ = [
    "ClusterDriver",
    "Credentials",
    "CredentialResolver",
]
