"""Kubeconfig rendering.

Output is deterministic: identical inputs produce byte-identical YAML. Auth
stanzas reference a token plugin (``ExecAuth``) or embed a static bearer token
(``StaticTokenAuth``). Exec stanzas never carry provider secrets; the plugin
resolves credentials from the operator's own environment.
"""

from dataclasses import dataclass, field
from typing import Any

import yaml

EXEC_API_VERSION = "client.authentication.k8s.io/v1beta1"


@dataclass(frozen=True)
class ExecAuth:
    """Token plugin invoked by kubectl."""

    command: str
    args: list[str] = field(default_factory=list)
    install_hint: str | None = None
    provide_cluster_info: bool = False
    api_version: str = EXEC_API_VERSION

    def to_user(self) -> dict[str, Any]:
        stanza: dict[str, Any] = {
            "apiVersion": self.api_version,
            "command": self.command,
            "args": list(self.args),
        }
        if self.install_hint:
            stanza["installHint"] = self.install_hint
        if self.provide_cluster_info:
            stanza["provideClusterInfo"] = True
        return {"exec": stanza}


@dataclass(frozen=True)
class StaticTokenAuth:
    """Bearer token embedded in the kubeconfig."""

    token: str

    def to_user(self) -> dict[str, Any]:
        return {"token": self.token}


AuthStanza = ExecAuth | StaticTokenAuth


def build_context_name(
    provider: str,
    location: str,
    cluster_name: str,
    account: str | None = None,
) -> str:
    """Build a deterministic context name.

    Args:
        provider: Provider identifier
        location: Region or zone of the cluster
        cluster_name: Cluster name
        account: Project or account id, if the provider scopes clusters by one

    Returns:
        Context name such as ``gke_my-project_us-central1-b_prod``
    """
    prefix = {"aws": "eks", "gcp": "gke"}.get(provider, provider)
    parts = [prefix]
    if account:
        parts.append(account)
    parts.extend([location, cluster_name])
    return "_".join(parts)


def _server_url(endpoint: str) -> str:
    if endpoint.startswith(("https://", "http://")):
        return endpoint
    return f"https://{endpoint}"


def build_kubeconfig(
    endpoint: str,
    ca_data: str,
    context_name: str,
    auth: AuthStanza,
) -> dict[str, Any]:
    """Build the kubeconfig document as a dict with a fixed key order."""
    cluster: dict[str, Any] = {"server": _server_url(endpoint)}
    if ca_data:
        cluster["certificate-authority-data"] = ca_data

    return {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": context_name, "cluster": cluster}],
        "contexts": [
            {
                "name": context_name,
                "context": {"cluster": context_name, "user": context_name},
            }
        ],
        "current-context": context_name,
        "preferences": {},
        "users": [{"name": context_name, "user": auth.to_user()}],
    }


def render_kubeconfig(
    endpoint: str,
    ca_data: str,
    context_name: str,
    auth: AuthStanza,
) -> str:
    """Render a single-context kubeconfig as YAML.

    Args:
        endpoint: API server host or URL; ``https://`` is added when missing
        ca_data: Base64-encoded cluster CA certificate
        context_name: Name used for the cluster, user and context entries
        auth: User auth stanza

    Returns:
        Kubeconfig YAML text
    """
    document = build_kubeconfig(endpoint, ca_data, context_name, auth)
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)
