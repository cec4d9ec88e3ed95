"""kube-provision: provision secrets, environments and packages on Kubernetes.

This package scans catalog resources and templates for secret annotations,
imports or generates the requested key material and creates the secrets,
and manages the environments and packages configmaps of a project.

Example usage:
    from kube_provision import Cluster, ProvisionOptions, SecretProvisioner
    from kube_provision.secrets import load_catalog_resources

    cluster = Cluster()
    namespace = cluster.resolve_namespace()
    provisioner = SecretProvisioner(cluster, namespace, ProvisionOptions())
    result = provisioner.provision(load_catalog_resources(cluster, namespace))
"""

__version__ = "0.1.0"

from kube_provision.cli import cli
from kube_provision.cluster import Cluster
from kube_provision.exceptions import (
    ClusterConnectionError,
    DefaultSettingsFetchError,
    EnvironmentConfigError,
    KeyImportError,
    ProvisionError,
    TemplateDecodeError,
    UnknownSecretTypeError,
)
from kube_provision.models import ProvisionOptions, ProvisionResult
from kube_provision.projects import detect_current_project
from kube_provision.secrets import SecretDataResolver, SecretProvisioner

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "Cluster",
    "ProvisionOptions",
    "ProvisionResult",
    "SecretDataResolver",
    "SecretProvisioner",
    # Functions
    "detect_current_project",
    # Exceptions
    "ProvisionError",
    "ClusterConnectionError",
    "DefaultSettingsFetchError",
    "EnvironmentConfigError",
    "KeyImportError",
    "TemplateDecodeError",
    "UnknownSecretTypeError",
]
