"""Main CLI entry point for kubeorch."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.table import Table

from kubeorch import __version__

if TYPE_CHECKING:
    from kubeorch.core.config import KubeorchConfig
    from kubeorch.core.models import ClusterInfo, Credential, NodeGroupInfo
    from kubeorch.orchestrator import ClusterOrchestrator
    from kubeorch.security.fernet_resolver import FernetCredentialResolver

console = Console()


class KubeorchContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str | None):
        """Initialize context with config path.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.config_path = config_path
        self._config: KubeorchConfig | None = None
        self._resolver: FernetCredentialResolver | None = None
        self._orchestrator: ClusterOrchestrator | None = None

    @property
    def config(self) -> KubeorchConfig:
        """Get or create config lazily."""
        if self._config is None:
            from kubeorch.core.config import KubeorchConfig

            if self.config_path:
                self._config = KubeorchConfig.from_file(self.config_path)
            else:
                self._config = KubeorchConfig()
        return self._config

    @property
    def resolver(self) -> FernetCredentialResolver:
        """Get or create credential resolver lazily."""
        if self._resolver is None:
            from kubeorch.security.fernet_resolver import FernetCredentialResolver

            self._resolver = FernetCredentialResolver.from_config(self.config.credentials)
        return self._resolver

    @property
    def orchestrator(self) -> ClusterOrchestrator:
        """Get or create orchestrator lazily."""
        if self._orchestrator is None:
            from kubeorch.orchestrator import ClusterOrchestrator

            self._orchestrator = ClusterOrchestrator(resolver=self.resolver, config=self.config)
        return self._orchestrator


def _load_credential(provider: str, path: str) -> Credential:
    from kubeorch.core.models import Credential

    return Credential(provider=provider, encrypted_data=Path(path).read_bytes())


def _load_yaml(path: str) -> dict[str, Any]:
    import yaml

    with Path(path).open() as f:
        return yaml.safe_load(f) or {}


def _run(coro_factory: Callable[[], Coroutine[Any, Any, Any]]) -> Any:
    """Run an orchestrator coroutine, printing kubeorch errors and exiting 1."""
    from kubeorch.core.exceptions import KubeorchError

    try:
        return asyncio.run(coro_factory())
    except KubeorchError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from e


def _print_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _cluster_table(clusters: list[ClusterInfo], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Status", style="bold")
    table.add_column("Region", style="blue")
    table.add_column("Zone", style="magenta")
    table.add_column("Endpoint")

    for cluster in clusters:
        table.add_row(
            cluster.name,
            cluster.version or "-",
            cluster.status or "-",
            cluster.region,
            cluster.zone or "-",
            cluster.endpoint or "-",
        )
    return table


def _node_group_table(groups: list[NodeGroupInfo], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Instance Types", style="green")
    table.add_column("Min/Desired/Max", style="yellow")
    table.add_column("Version")

    for group in groups:
        s = group.scaling
        table.add_row(
            group.name,
            group.status or "-",
            ", ".join(group.instance_types) or "-",
            f"{s.min_size}/{s.desired_size}/{s.max_size}",
            group.version or "-",
        )
    return table


def provider_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Common --provider/--credential/--region options."""
    fn = click.option("--region", required=True, help="Provider region")(fn)
    fn = click.option(
        "--credential",
        "credential_path",
        required=True,
        type=click.Path(exists=True, dir_okay=False),
        help="Path to encrypted credential blob",
    )(fn)
    fn = click.option("--provider", required=True, help="Provider id (aws, gcp, azure, ncp)")(fn)
    return fn


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to configuration file",
)
@click.option("--log-level", default=None, help="Override configured log level")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """Kubernetes cluster orchestrator - manage clusters across cloud providers."""
    from kubeorch.utils.logging import setup_logging

    ctx.obj = KubeorchContext(config_path=config)
    log_cfg = ctx.obj.config.logging
    setup_logging(level=log_level or log_cfg.level, format=log_cfg.format, output="stderr")


@cli.group()
def clusters() -> None:
    """Cluster lifecycle commands."""


@clusters.command(name="list")
@provider_options
@click.option("--format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def list_clusters(
    ctx: click.Context, provider: str, credential_path: str, region: str, format: str
) -> None:
    """List clusters in a region (and its zones)."""
    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.list_clusters(provider, credential, region))

    if format == "json":
        _print_json([c.model_dump(mode="json") for c in result])
    elif not result:
        console.print("[yellow]No clusters found[/yellow]")
    else:
        console.print(_cluster_table(result, f"{provider} clusters in {region} ({len(result)})"))


@clusters.command(name="get")
@provider_options
@click.argument("name")
@click.pass_context
def get_cluster(
    ctx: click.Context, provider: str, credential_path: str, region: str, name: str
) -> None:
    """Show one cluster."""
    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.get_cluster(provider, credential, name, region))
    _print_json(result.model_dump(mode="json"))


@clusters.command(name="create")
@click.option("--provider", required=True, help="Provider id (aws, gcp, azure, ncp)")
@click.option(
    "--credential",
    "credential_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to encrypted credential blob",
)
@click.option(
    "--spec",
    "spec_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to cluster spec YAML",
)
@click.pass_context
def create_cluster(ctx: click.Context, provider: str, credential_path: str, spec_path: str) -> None:
    """Create a cluster from a YAML spec."""
    from kubeorch.core.models import ClusterSpec

    spec = ClusterSpec(**_load_yaml(spec_path))
    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.create_cluster(provider, credential, spec))

    console.print(f"[green]✓ Cluster {result.name} is {result.status}[/green]")
    _print_json(result.model_dump(mode="json"))


@clusters.command(name="delete")
@provider_options
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not prompt for confirmation")
@click.pass_context
def delete_cluster(
    ctx: click.Context, provider: str, credential_path: str, region: str, name: str, yes: bool
) -> None:
    """Delete a cluster."""
    if not yes:
        click.confirm(f"Delete cluster {name} in {region}?", abort=True)

    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.delete_cluster(provider, credential, name, region))
    console.print(f"[green]✓ Cluster {result.name} ({result.location}) is {result.status}[/green]")


@clusters.command(name="kubeconfig")
@provider_options
@click.argument("name")
@click.option(
    "--output", "output_path", type=click.Path(dir_okay=False), help="Write to file instead"
)
@click.pass_context
def kubeconfig(
    ctx: click.Context,
    provider: str,
    credential_path: str,
    region: str,
    name: str,
    output_path: str | None,
) -> None:
    """Print or write a kubeconfig for a cluster."""
    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.get_kubeconfig(provider, credential, name, region))

    if output_path:
        path = Path(output_path)
        path.write_text(result.kubeconfig)
        path.chmod(0o600)
        console.print(f"[green]✓ Wrote context {result.context_name} to {path}[/green]")
    else:
        click.echo(result.kubeconfig, nl=False)


@cli.group(name="node-groups")
def node_groups() -> None:
    """Node group commands."""


@node_groups.command(name="list")
@provider_options
@click.option("--cluster", "cluster_name", required=True, help="Cluster name")
@click.option("--format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def list_node_groups(
    ctx: click.Context,
    provider: str,
    credential_path: str,
    region: str,
    cluster_name: str,
    format: str,
) -> None:
    """List node groups of a cluster."""
    credential = _load_credential(provider, credential_path)
    result = _run(
        lambda: ctx.obj.orchestrator.list_node_groups(provider, credential, cluster_name, region)
    )

    if format == "json":
        _print_json([g.model_dump(mode="json") for g in result])
    elif not result:
        console.print("[yellow]No node groups found[/yellow]")
    else:
        console.print(_node_group_table(result, f"Node groups of {cluster_name} ({len(result)})"))


@node_groups.command(name="get")
@provider_options
@click.option("--cluster", "cluster_name", required=True, help="Cluster name")
@click.argument("name")
@click.pass_context
def get_node_group(
    ctx: click.Context,
    provider: str,
    credential_path: str,
    region: str,
    cluster_name: str,
    name: str,
) -> None:
    """Show one node group."""
    credential = _load_credential(provider, credential_path)
    result = _run(
        lambda: ctx.obj.orchestrator.get_node_group(
            provider, credential, cluster_name, name, region
        )
    )
    _print_json(result.model_dump(mode="json"))


@node_groups.command(name="create")
@click.option("--provider", required=True, help="Provider id (aws, gcp, azure, ncp)")
@click.option(
    "--credential",
    "credential_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to encrypted credential blob",
)
@click.option(
    "--spec",
    "spec_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to node group spec YAML",
)
@click.pass_context
def create_node_group(
    ctx: click.Context, provider: str, credential_path: str, spec_path: str
) -> None:
    """Create a node group from a YAML spec."""
    from kubeorch.core.models import NodeGroupSpec

    spec = NodeGroupSpec(**_load_yaml(spec_path))
    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.create_node_group(provider, credential, spec))

    console.print(f"[green]✓ Node group {result.name} is {result.status}[/green]")
    _print_json(result.model_dump(mode="json"))


@node_groups.command(name="delete")
@provider_options
@click.option("--cluster", "cluster_name", required=True, help="Cluster name")
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not prompt for confirmation")
@click.pass_context
def delete_node_group(
    ctx: click.Context,
    provider: str,
    credential_path: str,
    region: str,
    cluster_name: str,
    name: str,
    yes: bool,
) -> None:
    """Delete a node group."""
    if not yes:
        click.confirm(f"Delete node group {name} of {cluster_name}?", abort=True)

    credential = _load_credential(provider, credential_path)
    result = _run(
        lambda: ctx.obj.orchestrator.delete_node_group(
            provider, credential, cluster_name, name, region
        )
    )
    console.print(f"[green]✓ Node group {result.name} is {result.status}[/green]")


@cli.group()
def catalog() -> None:
    """Provider catalogue lookups (versions, regions, zones)."""


def _print_list(items: list[str], format: str, empty: str) -> None:
    if format == "json":
        _print_json(items)
    elif not items:
        console.print(f"[yellow]{empty}[/yellow]")
    else:
        for item in items:
            click.echo(item)


@catalog.command(name="versions")
@provider_options
@click.option("--format", type=click.Choice(["text", "json"]), default="text")
@click.pass_context
def list_versions(
    ctx: click.Context, provider: str, credential_path: str, region: str, format: str
) -> None:
    """List Kubernetes versions available for new clusters."""
    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.list_versions(provider, credential, region))
    _print_list(result, format, "No versions found")


@catalog.command(name="regions")
@click.option("--provider", required=True, help="Provider id (aws, gcp, azure, ncp)")
@click.option(
    "--credential",
    "credential_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to encrypted credential blob",
)
@click.option("--format", type=click.Choice(["text", "json"]), default="text")
@click.pass_context
def list_regions(ctx: click.Context, provider: str, credential_path: str, format: str) -> None:
    """List regions enabled for the account."""
    credential = _load_credential(provider, credential_path)
    result = _run(lambda: ctx.obj.orchestrator.list_regions(provider, credential))
    _print_list(result, format, "No regions found")


@catalog.command(name="zones")
@provider_options
@click.option("--format", type=click.Choice(["text", "json"]), default="text")
@click.pass_context
def list_zones(
    ctx: click.Context, provider: str, credential_path: str, region: str, format: str
) -> None:
    """List available zones in a region."""
    credential = _load_credential(provider, credential_path)
    result = _run(
        lambda: ctx.obj.orchestrator.list_availability_zones(provider, credential, region)
    )
    _print_list(result, format, "No zones found")


@cli.group()
def credentials() -> None:
    """Credential blob tooling."""


@credentials.command(name="generate-key")
def generate_key() -> None:
    """Print a new credential encryption key."""
    from kubeorch.security.fernet_resolver import FernetCredentialResolver

    click.echo(FernetCredentialResolver.generate_key())


@credentials.command(name="encrypt")
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Plaintext credential JSON (AWS keys or GCP service account)",
)
@click.option("--output", "output_path", required=True, type=click.Path(dir_okay=False))
@click.pass_context
def encrypt(ctx: click.Context, input_path: str, output_path: str) -> None:
    """Encrypt a credential JSON file into a blob."""
    from kubeorch.core.exceptions import ConfigurationError

    try:
        resolver = ctx.obj.resolver
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from e

    data = json.loads(Path(input_path).read_text())
    path = Path(output_path)
    path.write_bytes(resolver.encrypt(data))
    path.chmod(0o600)
    console.print(f"[green]✓ Wrote encrypted credential to {path}[/green]")


if __name__ == "__main__":
    cli()
