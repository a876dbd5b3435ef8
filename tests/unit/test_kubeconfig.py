"""Tests for kubeconfig rendering utilities."""

import yaml

from kubeorch.utils.kubeconfig import (
    EXEC_API_VERSION,
    ExecAuth,
    StaticTokenAuth,
    build_context_name,
    render_kubeconfig,
)


def gke_auth() -> ExecAuth:
    return ExecAuth(
        command="gke-gcloud-auth-plugin",
        install_hint="install the plugin",
        provide_cluster_info=True,
    )


class TestBuildContextName:
    """Test context name construction."""

    def test_gke_with_project(self) -> None:
        """Test GKE names follow gke_<project>_<location>_<name>."""
        assert (
            build_context_name("gcp", "us-central1-b", "prod", account="my-project")
            == "gke_my-project_us-central1-b_prod"
        )

    def test_eks_without_account(self) -> None:
        """Test EKS names follow eks_<region>_<name>."""
        assert build_context_name("aws", "us-east-1", "prod") == "eks_us-east-1_prod"

    def test_unknown_provider_uses_provider_id(self) -> None:
        """Test other providers use their own id as prefix."""
        assert build_context_name("ncp", "KR", "c1") == "ncp_KR_c1"


class TestRenderKubeconfig:
    """Test render_kubeconfig."""

    def test_byte_identical_for_identical_inputs(self) -> None:
        """Test rendering twice yields the same bytes."""
        first = render_kubeconfig("34.1.2.3", "Q0E=", "gke_p_r1_c", gke_auth())
        second = render_kubeconfig("34.1.2.3", "Q0E=", "gke_p_r1_c", gke_auth())

        assert first.encode() == second.encode()

    def test_structure(self) -> None:
        """Test cluster, context and user entries share the context name."""
        doc = yaml.safe_load(render_kubeconfig("34.1.2.3", "Q0E=", "ctx", gke_auth()))

        assert doc["apiVersion"] == "v1"
        assert doc["kind"] == "Config"
        assert doc["current-context"] == "ctx"
        assert doc["preferences"] == {}
        assert doc["clusters"] == [
            {
                "name": "ctx",
                "cluster": {"server": "https://34.1.2.3", "certificate-authority-data": "Q0E="},
            }
        ]
        assert doc["contexts"] == [{"name": "ctx", "context": {"cluster": "ctx", "user": "ctx"}}]
        assert doc["users"][0]["name"] == "ctx"

    def test_key_order(self) -> None:
        """Test top-level keys are emitted in a fixed order."""
        text = render_kubeconfig("h", "", "ctx", StaticTokenAuth("t"))
        top_level = [line.split(":")[0] for line in text.splitlines() if not line.startswith((" ", "-"))]

        assert top_level == [
            "apiVersion",
            "kind",
            "clusters",
            "contexts",
            "current-context",
            "preferences",
            "users",
        ]

    def test_existing_scheme_kept(self) -> None:
        """Test endpoints that already carry a scheme are not prefixed."""
        doc = yaml.safe_load(
            render_kubeconfig("https://abc.eks.amazonaws.com", "Q0E=", "ctx", StaticTokenAuth("t"))
        )

        assert doc["clusters"][0]["cluster"]["server"] == "https://abc.eks.amazonaws.com"

    def test_exec_stanza(self) -> None:
        """Test exec auth carries plugin settings."""
        doc = yaml.safe_load(render_kubeconfig("h", "Q0E=", "ctx", gke_auth()))

        assert doc["users"][0]["user"] == {
            "exec": {
                "apiVersion": EXEC_API_VERSION,
                "command": "gke-gcloud-auth-plugin",
                "args": [],
                "installHint": "install the plugin",
                "provideClusterInfo": True,
            }
        }

    def test_exec_stanza_has_no_env(self) -> None:
        """Test exec auth never embeds environment variables."""
        auth = ExecAuth(command="aws", args=["eks", "get-token", "--cluster-name", "c"])
        doc = yaml.safe_load(render_kubeconfig("h", "Q0E=", "ctx", auth))

        assert "env" not in doc["users"][0]["user"]["exec"]

    def test_static_token(self) -> None:
        """Test static token fallback."""
        doc = yaml.safe_load(render_kubeconfig("h", "Q0E=", "ctx", StaticTokenAuth("abc")))

        assert doc["users"][0]["user"] == {"token": "abc"}

    def test_empty_ca_omitted(self) -> None:
        """Test missing CA data is omitted rather than emitted empty."""
        doc = yaml.safe_load(render_kubeconfig("h", "", "ctx", StaticTokenAuth("abc")))

        assert "certificate-authority-data" not in doc["clusters"][0]["cluster"]
