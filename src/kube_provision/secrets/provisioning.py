"""Secret provisioning.

Scans catalog resources and templates for secret annotations, resolves
the data of every requested secret and creates the secrets in the cluster.
"""

from collections.abc import Iterable
from typing import Any

from icecream import ic
from kubernetes.client.rest import ApiException

from kube_provision import console
from kube_provision.cluster import Cluster
from kube_provision.exceptions import ClusterConnectionError, DefaultSettingsFetchError
from kube_provision.models import (
    ProvisionOptions,
    ProvisionResult,
    ResolvedData,
    SecretOutcome,
    SecretRecord,
    SecretRequirement,
    SecretTarget,
)
from kube_provision.secrets.resolution import SecretDataResolver
from kube_provision.secrets.scanning import decode_catalog_entry, expand_requirement, scan_annotations

CATALOG_LABELS = {"provider": "fabric8.io", "kind": "catalog"}


def load_catalog_resources(cluster: Cluster, namespace: str) -> list[dict[str, Any]]:
    """Load and decode every resource stored in the catalog configmaps.

    A catalog that cannot be listed is reported and treated as empty.

    """
    try:
        config_maps = cluster.list_config_maps(namespace, CATALOG_LABELS)
    except ApiException as err:
        console.error(f"Failed to load Catalog configmaps: {err.reason}")
        return []

    resources: list[dict[str, Any]] = []
    for config_map in config_maps:
        for key, text in (config_map.data or {}).items():
            resource = decode_catalog_entry(config_map.metadata.name, key, text)
            if resource is not None:
                resources.append(resource)
    ic(len(resources))
    return resources


class SecretProvisioner:
    """Creates the secrets requested by annotations in a namespace.

    Attributes:
        cluster: Cluster the secrets are created in.
        namespace: Namespace the secrets are created in.
        options: Import and generation options.
        resolver: Produces the data of each secret.

    """

    def __init__(
        self,
        cluster: Cluster,
        namespace: str,
        options: ProvisionOptions,
        resolver: SecretDataResolver | None = None,
    ) -> None:
        self.cluster = cluster
        self.namespace = namespace
        self.options = options
        self.resolver = resolver if resolver is not None else SecretDataResolver(options)

    def provision(
        self,
        catalog_resources: Iterable[dict[str, Any]],
        templates: Iterable[dict[str, Any]] = (),
    ) -> ProvisionResult:
        """Create every secret requested by the given resources.

        All annotations are scanned and validated before the first secret is
        created, so a run that aborts does so without touching the cluster.
        Failures of individual secrets are recorded and do not stop the run.

        Args:
            catalog_resources: Decoded catalog resources.
            templates: Templates found in the namespace.

        Returns:
            ProvisionResult with one outcome per attempted secret.

        Raises:
            TemplateDecodeError: If an object inside a template cannot be decoded.
            UnknownSecretTypeError: If an annotation names an unsupported kind.

        """
        requirements = scan_annotations([*catalog_resources, *templates])
        kinds = {requirement.kind for requirement in requirements}
        ic(kinds)

        result = ProvisionResult()
        for requirement in requirements:
            targets = expand_requirement(requirement)
            if not targets:
                result.outcomes.append(self._reject(requirement))
                continue
            for target in targets:
                result.outcomes.append(self._provision_target(target))

        ic(result.created, result.failed)
        return result

    @staticmethod
    def _reject(requirement: SecretRequirement) -> SecretOutcome:
        reason = "annotation does not name a secret"
        console.result(f"{requirement.secret_type} secret", False, reason)
        return SecretOutcome(name="", secret_type=requirement.secret_type, success=False, error=reason)

    def _provision_target(self, target: SecretTarget) -> SecretOutcome:
        subject = f"{target.name} secret"
        try:
            resolved = self.resolver.resolve(target)
            record = SecretRecord(name=target.name, type=target.secret_type, data=resolved.data)
            self.cluster.apply_secret(self.namespace, record)
        except (ClusterConnectionError, DefaultSettingsFetchError) as err:
            console.result(subject, False, str(err))
            return SecretOutcome(name=target.name, secret_type=target.secret_type, success=False, error=str(err))
        except ApiException as err:
            reason = f"{err.status} {err.reason}"
            console.result(subject, False, reason)
            return SecretOutcome(name=target.name, secret_type=target.secret_type, success=False, error=reason)

        console.result(_describe(subject, resolved), True)
        return SecretOutcome(
            name=target.name,
            secret_type=target.secret_type,
            success=True,
            missing=resolved.missing,
        )


def _describe(subject: str, resolved: ResolvedData) -> str:
    notes = []
    if resolved.generated:
        notes.append("generated")
    if not resolved.complete:
        notes.append(f"missing: {', '.join(resolved.missing)}")
    if notes:
        return f"{subject} ({'; '.join(notes)})"
    return subject
