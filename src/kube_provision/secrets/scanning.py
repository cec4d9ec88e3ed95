"""Annotation scanning for secret requirements.

Catalog resources and templates declare the secrets their pods need
through pod template annotations::

    metadata:
      annotations:
        fabric8.io/secret-ssh-key: jenkins-ssh,gogs-ssh
        fabric8.io/secret-maven-settings: jenkins-maven-settings

Each annotation becomes one SecretRequirement, which is then expanded into
the individual secrets to create.
"""

import re
from collections.abc import Iterable, Iterator
from typing import Any

import yaml
from icecream import ic

from kube_provision import console
from kube_provision.exceptions import TemplateDecodeError
from kube_provision.models import SECRET_KIND_FILES, SecretKind, SecretRequirement, SecretTarget

REPLICATION_KINDS = frozenset(
    {
        "ReplicationController",
        "ReplicaSet",
        "Deployment",
        "DeploymentConfig",
        "StatefulSet",
        "DaemonSet",
    }
)
TEMPLATE_KIND = "Template"

_PUBLIC_KEY_DELIMITERS = re.compile(r"[,\[\]]")


def decode_catalog_entry(config_map_name: str, key: str, text: str) -> dict[str, Any] | None:
    """Decode one data entry of a catalog configmap.

    Catalog entries that cannot be decoded are reported and skipped.

    Args:
        config_map_name: Name of the configmap, for messages.
        key: The data key holding the document.
        text: The YAML or JSON document.

    Returns:
        The decoded resource, or None if it could not be decoded.

    """
    try:
        obj = yaml.safe_load(text)
    except yaml.YAMLError as err:
        console.warning(f"Failed to decode config map {config_map_name} with key {key}. Got error: {err}")
        return None

    if not isinstance(obj, dict) or "kind" not in obj:
        console.warning(f"Failed to decode config map {config_map_name} with key {key}. Not a Kubernetes resource")
        return None
    return obj


def _decode_template_object(template_name: str, obj: Any) -> dict[str, Any]:
    """Decode an object embedded in a template.

    Raises:
        TemplateDecodeError: If the object is not a Kubernetes resource.

    """
    if isinstance(obj, str):
        try:
            obj = yaml.safe_load(obj)
        except yaml.YAMLError as err:
            raise TemplateDecodeError(f"Failed to decode template {template_name}: {err}") from err

    if not isinstance(obj, dict) or not obj.get("kind"):
        raise TemplateDecodeError(f"Failed to decode template {template_name}: object without a kind: {obj!r}")
    return obj


def _pod_template_annotations(workload: dict[str, Any]) -> dict[str, str]:
    spec = workload.get("spec") or {}
    template = spec.get("template") or {}
    metadata = template.get("metadata") or {}
    return metadata.get("annotations") or {}


def _workloads(resources: Iterable[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    """Flatten templates into the replication-style workloads they contain."""
    for resource in resources:
        kind = resource.get("kind")
        if kind in REPLICATION_KINDS:
            yield resource
        elif kind == TEMPLATE_KIND:
            name = (resource.get("metadata") or {}).get("name", "<unnamed>")
            # decode everything first so a broken template yields nothing
            objects = [_decode_template_object(name, obj) for obj in resource.get("objects") or []]
            yield from (obj for obj in objects if obj["kind"] in REPLICATION_KINDS)


def scan_annotations(resources: Iterable[dict[str, Any]]) -> list[SecretRequirement]:
    """Extract secret requirements from workloads and templates.

    Args:
        resources: Decoded resources; replication-style workloads and
            templates are scanned, anything else is ignored.

    Returns:
        One requirement per pod template annotation.

    Raises:
        TemplateDecodeError: If an object inside a template cannot be decoded.

    """
    requirements = [
        SecretRequirement(secret_type=key, identifiers=str(value))
        for workload in _workloads(resources)
        for key, value in _pod_template_annotations(workload).items()
    ]
    ic(requirements)
    return requirements


def expand_requirement(requirement: SecretRequirement) -> list[SecretTarget]:
    """Expand a requirement into the individual secrets to create.

    Returns:
        The secrets to create; empty if the annotation names none.

    Raises:
        UnknownSecretTypeError: If the requirement's kind is not supported.

    """
    kind = requirement.kind
    secret_type = requirement.secret_type

    match kind:
        case SecretKind.SSH_KEY:
            names = [name.strip() for name in requirement.identifiers.split(",")]
            return [
                SecretTarget(name=name, secret_type=secret_type, key_names=SECRET_KIND_FILES[kind])
                for name in names
                if name
            ]
        case SecretKind.SSH_PUBLIC_KEY:
            tokens = [t.strip() for t in _PUBLIC_KEY_DELIMITERS.split(requirement.identifiers) if t.strip()]
            if not tokens:
                return []
            name, *key_names = tokens
            return [
                SecretTarget(
                    name=name,
                    secret_type=secret_type,
                    key_names=tuple(key_names) or SECRET_KIND_FILES[kind],
                )
            ]
        case _:
            name = requirement.identifiers.strip()
            if not name:
                return []
            return [SecretTarget(name=name, secret_type=secret_type, key_names=SECRET_KIND_FILES[kind])]
