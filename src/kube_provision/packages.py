"""Installed packages.

Every installed package is recorded as a configmap labelled
``fabric8.io/kind=package``, with its version in the ``version`` label.
"""

from kube_provision.cluster import Cluster
from kube_provision.models import PackageInfo

PACKAGE_LABELS = {"fabric8.io/kind": "package"}


def list_packages(cluster: Cluster, namespace: str) -> list[PackageInfo]:
    """List the packages installed in a namespace."""
    return [
        PackageInfo(
            name=config_map.metadata.name,
            version=(config_map.metadata.labels or {}).get("version", ""),
        )
        for config_map in cluster.list_config_maps(namespace, PACKAGE_LABELS)
    ]
