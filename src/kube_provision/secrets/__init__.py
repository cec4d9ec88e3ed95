"""Secrets provisioning subpackage.

This package contains modules for scanning annotations, resolving secret
data from local key material and creating the secrets in the cluster.
"""

from kube_provision.secrets.keys import LocalKeyStore, generate_ssh_key_pair
from kube_provision.secrets.provisioning import SecretProvisioner, load_catalog_resources
from kube_provision.secrets.resolution import SecretDataResolver
from kube_provision.secrets.scanning import decode_catalog_entry, expand_requirement, scan_annotations

__all__ = [
    # keys
    "LocalKeyStore",
    "generate_ssh_key_pair",
    # scanning
    "decode_catalog_entry",
    "expand_requirement",
    "scan_annotations",
    # resolution
    "SecretDataResolver",
    # provisioning
    "SecretProvisioner",
    "load_catalog_resources",
]
