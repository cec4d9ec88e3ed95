#!/usr/bin/env python
"""Command-line interface for kube-provision.

This module provides the main CLI entry point for the kube-provision tool,
handling command-line argument parsing and dispatching to the secrets,
environments and packages operations.
"""

import sys
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import click
from icecream import ic
from kubernetes.client.rest import ApiException

from kube_provision import __version__, console
from kube_provision.cluster import AUTODETECT, Cluster
from kube_provision.environ import create_environment, delete_environment, list_environments, parse_environment_args
from kube_provision.exceptions import ProvisionError
from kube_provision.models import ProvisionOptions, ProvisionResult
from kube_provision.packages import list_packages
from kube_provision.prompts import confirm_action
from kube_provision.secrets import SecretProvisioner, load_catalog_resources

SECRET_ANNOTATIONS_DOCS = "https://github.com/fabric8io/fabric8/blob/master/docs/secretAnnotations.md"


@dataclass(frozen=True, slots=True)
class Settings:
    """Global options shared by all subcommands."""

    select: bool = False
    yes: bool = False
    work_project: str = AUTODETECT


@contextmanager
def fatal_errors() -> Generator[None, None, None]:
    """Report fatal errors and exit with a non-zero status."""
    try:
        yield
    except ProvisionError as e:
        console.error(str(e))
        sys.exit(1)
    except ApiException as e:
        console.error(f"Kubernetes API request failed: {e.status} {e.reason}")
        sys.exit(1)


def connect(settings: Settings) -> tuple[Cluster, str]:
    """Connect to the cluster and resolve the namespace to work in."""
    cluster = Cluster(select=settings.select)
    namespace = cluster.resolve_namespace(settings.work_project)
    ic(cluster, namespace)
    return cluster, namespace


def print_summary(result: ProvisionResult) -> None:
    """Print the outcome of a secrets run."""
    if result.outcomes:
        console.newline()
        console.summary_panel(
            "Secrets",
            {"Created": str(result.created), "Failed": str(result.failed)},
        )
    if result.created:
        return
    if result.outcomes:
        console.info("No secrets created, every annotated secret failed")
    else:
        console.info("No secrets created as no fabric8 secrets annotations found in the Fabric8 Catalog")
    console.info(f"For more details see: {SECRET_ANNOTATIONS_DOCS}")


@click.group(
    help="Set up and inspect secrets, environments and packages on Kubernetes or OpenShift",
    invoke_without_command=True,
)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--select", required=False, is_flag=True, default=False, help="prompt for context select")
@click.option("--yes", "-y", required=False, is_flag=True, default=False, help="assume yes to confirmation prompts")
@click.option(
    "--work-project",
    default=AUTODETECT,
    show_default=True,
    help="namespace to work in, autodetected from the current project by default",
)
@click.pass_context
def cli(ctx: click.Context, version: bool, debug: bool, select: bool, yes: bool, work_project: str) -> None:
    """Process global options.

    Args:
        ctx: Click context, receives the Settings for subcommands.
        version: Print version and exit.
        debug: Enable debug output.
        select: Prompt for Kubernetes context selection.
        yes: Skip confirmation prompts.
        work_project: Namespace to use instead of autodetection.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    ctx.obj = Settings(select=select, yes=yes, work_project=work_project)


@cli.command(name="secrets", help="Set up Secrets on your Kubernetes or OpenShift environment")
@click.option(
    "--print-import-folder-structure/--no-print-import-folder-structure",
    default=True,
    help="print the folder structure used by the annotations to import secrets",
)
@click.option(
    "--write-generated-keys",
    is_flag=True,
    default=False,
    help="write generated secrets to the local filesystem",
)
@click.option(
    "--generate-secrets-data/--no-generate-secrets-data",
    "-g",
    default=True,
    help="generate secrets data if it cannot be imported from the local filesystem",
)
@click.option(
    "--key-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="directory containing one folder of key material per secret",
)
@click.pass_obj
def secrets_command(
    settings: Settings,
    print_import_folder_structure: bool,
    write_generated_keys: bool,
    generate_secrets_data: bool,
    key_root: Path,
) -> None:
    """Create the secrets requested by annotations in the catalog and templates."""
    options = ProvisionOptions(
        print_import_paths=print_import_folder_structure,
        write_generated_keys=write_generated_keys,
        generate_if_missing=generate_secrets_data,
        key_root=key_root,
    )
    ic(options)

    with fatal_errors():
        cluster, namespace = connect(settings)
        console.action(
            f"Setting up secrets on your {console.highlight(cluster.master_type.value)} installation "
            f"at {console.highlight(cluster.host)} in namespace {console.highlight(namespace)}"
        )
        if not confirm_action(assume_yes=settings.yes):
            console.warning("Aborted, no secrets created.")
            return

        catalog = load_catalog_resources(cluster, namespace)
        try:
            templates = cluster.list_templates(namespace)
        except ApiException as e:
            raise click.ClickException(f"No Templates found in namespace {namespace}: {e.reason}") from e

        result = SecretProvisioner(cluster, namespace, options).provision(catalog, templates)

    print_summary(result)


@cli.command(name="packages", help="Lists the packages that are currently installed")
@click.pass_obj
def packages_command(settings: Settings) -> None:
    with fatal_errors():
        cluster, namespace = connect(settings)
        console.action(
            f"Packages in your {console.highlight(cluster.master_type.value)} installation "
            f"at {console.highlight(cluster.host)} in namespace {console.highlight(namespace)}"
        )
        packages = list_packages(cluster, namespace)

    if not packages:
        console.info("No packages installed")
        return
    console.table(["PACKAGE", "VERSION"], [(package.name, package.version) for package in packages])


@cli.group(help="Display resources")
def get() -> None:
    pass


@cli.group(help="Create resources")
def create() -> None:
    pass


@cli.group(help="Delete resources")
def delete() -> None:
    pass


@click.command(help="Get environments from the environments configmap")
@click.pass_obj
def get_environ(settings: Settings) -> None:
    with fatal_errors():
        cluster, namespace = connect(settings)
        environments = list_environments(cluster, namespace)

    console.table(
        ["ENV", "NAMESPACE", "ORDER"],
        [(key, entry.namespace, str(entry.order)) for key, entry in environments],
    )


@click.command(help="Create an environment: environ name=<name> namespace=<namespace> order=<int>")
@click.argument("assignments", nargs=-1, required=True)
@click.pass_obj
def create_environ(settings: Settings, assignments: tuple[str, ...]) -> None:
    with fatal_errors():
        entry = parse_environment_args(assignments)
        cluster, namespace = connect(settings)
        create_environment(cluster, namespace, entry)

    console.success(f"Environment {console.highlight(entry.name)} created in namespace {console.highlight(namespace)}")


@click.command(help="Delete an environment from the environments configmap")
@click.argument("name")
@click.pass_obj
def delete_environ(settings: Settings, name: str) -> None:
    with fatal_errors():
        cluster, namespace = connect(settings)
        deleted = delete_environment(cluster, namespace, name)

    if not deleted:
        console.warning(f"Could not find environment named {name}")
        return
    console.success(f"Environment {console.highlight(name)} has been deleted")


for alias in ("environ", "env"):
    get.add_command(get_environ, name=alias)
    create.add_command(create_environ, name=alias)
for alias in ("environ", "env", "environment"):
    delete.add_command(delete_environ, name=alias)


if __name__ == "__main__":
    cli()
