"""Kubernetes cluster interaction utilities.

This module provides the Cluster class, the only place that talks to the
Kubernetes (or OpenShift) API. It lists projects, templates and configmaps,
updates configmaps and creates secrets.
"""

import base64
from typing import Any

from icecream import ic
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from kube_provision import console
from kube_provision.exceptions import ClusterConnectionError
from kube_provision.models import MasterType, Project, SecretRecord
from kube_provision.projects import detect_current_project
from kube_provision.prompts import select_context

AUTODETECT = "autodetect"
DEFAULT_NAMESPACE = "default"

_OPENSHIFT_PROJECT_GROUP = "project.openshift.io"
_OPENSHIFT_TEMPLATE_GROUP = "template.openshift.io"


def label_selector(labels: dict[str, str]) -> str:
    """Build an equality-based label selector string.

    Args:
        labels: Label names and required values.

    Returns:
        A selector such as ``provider=fabric8.io,kind=catalog``.

    """
    return ",".join(f"{key}={value}" for key, value in labels.items())


class Cluster:
    """Manages interactions with a Kubernetes or OpenShift cluster.

    Attributes:
        context: The active kubeconfig context name.
        namespace: The namespace of the active context.
        master_type: Whether the cluster is plain Kubernetes or OpenShift.

    """

    def __init__(self, *, select: bool = False) -> None:
        """Load the kubeconfig and discover the type of installation.

        Args:
            select: If True, prompt the user to select a context.
                    Must be passed as a keyword argument.

        """
        self.context, self.namespace = self._set_context(select=select)
        config.load_kube_config(context=self.context)
        self.master_type: MasterType = self._detect_master_type()

    @staticmethod
    def _set_context(*, select: bool) -> tuple[str, str]:
        """Pick the kubeconfig context to use.

        Returns:
            The context name and the namespace configured for it.

        Raises:
            ClusterConnectionError: If kubeconfig is invalid or missing.

        """
        try:
            contexts, current_context = config.list_kube_config_contexts()
        except ConfigException as e:
            raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e

        chosen = current_context
        if select:
            name = select_context([context["name"] for context in contexts])
            chosen = next(context for context in contexts if context["name"] == name)

        namespace = (chosen.get("context") or {}).get("namespace") or DEFAULT_NAMESPACE
        ic(chosen["name"], namespace)
        return str(chosen["name"]), str(namespace)

    @staticmethod
    def _detect_master_type() -> MasterType:
        """Detect whether the API server is an OpenShift master.

        Raises:
            ClusterConnectionError: If the cluster is unreachable.

        """
        try:
            with console.spinner("Discovering the type of your installation..."):
                groups = client.ApisApi().get_api_versions().groups or []
        except MaxRetryError as e:
            raise ClusterConnectionError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e
        except ApiException as e:
            raise ClusterConnectionError(f"Could not discover the type of your installation: {e.reason}") from e

        names = [group.name for group in groups]
        ic(names)
        if _OPENSHIFT_PROJECT_GROUP in names:
            return MasterType.OPENSHIFT
        return MasterType.KUBERNETES

    @property
    def is_openshift(self) -> bool:
        return self.master_type == MasterType.OPENSHIFT

    @property
    def host(self) -> str:
        """The API server URL of the active context."""
        return str(client.Configuration.get_default_copy().host)

    def list_projects(self) -> list[Project]:
        """List the OpenShift projects visible to the current user."""
        res = client.CustomObjectsApi().list_cluster_custom_object(_OPENSHIFT_PROJECT_GROUP, "v1", "projects")
        projects = [Project(name=item["metadata"]["name"]) for item in res.get("items", [])]
        ic(projects)
        return projects

    def list_templates(self, namespace: str) -> list[dict[str, Any]]:
        """List OpenShift templates in a namespace.

        Returns:
            The templates as plain dictionaries, or an empty list on Kubernetes.

        """
        if not self.is_openshift:
            return []
        res = client.CustomObjectsApi().list_namespaced_custom_object(
            _OPENSHIFT_TEMPLATE_GROUP, "v1", namespace, "templates"
        )
        templates: list[dict[str, Any]] = res.get("items", [])
        for template in templates:
            template.setdefault("kind", "Template")
        return templates

    def list_config_maps(self, namespace: str, labels: dict[str, str]) -> list[Any]:
        """List the configmaps in a namespace that carry all the given labels.

        Raises:
            ClusterConnectionError: If the cluster cannot be reached.

        """
        selector = label_selector(labels)
        ic(namespace, selector)
        try:
            res = client.CoreV1Api().list_namespaced_config_map(namespace, label_selector=selector)
        except MaxRetryError as e:
            raise ClusterConnectionError(f"Failed to list configmaps in {namespace}: {e.reason}") from e
        return list(res.items)

    def update_config_map(self, namespace: str, config_map: Any) -> None:
        """Replace a configmap with the given object.

        Raises:
            ClusterConnectionError: If the cluster cannot be reached.

        """
        name = config_map.metadata.name
        try:
            client.CoreV1Api().replace_namespaced_config_map(name, namespace, config_map)
        except MaxRetryError as e:
            raise ClusterConnectionError(f"Failed to update configmap {name}: {e.reason}") from e

    def apply_secret(self, namespace: str, record: SecretRecord) -> None:
        """Create a secret, replacing it if one with the same name exists.

        Raises:
            ApiException: If the API server rejects the secret.
            ClusterConnectionError: If the cluster cannot be reached.

        """
        body = client.V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=client.V1ObjectMeta(name=record.name, namespace=namespace),
            type=record.type,
            data={key: base64.b64encode(value).decode("ascii") for key, value in record.data.items()},
        )
        core_v1_api = client.CoreV1Api()
        try:
            try:
                core_v1_api.create_namespaced_secret(namespace, body)
            except ApiException as e:
                if e.status != 409:
                    raise
                ic(f"secret {record.name} exists, replacing")
                core_v1_api.replace_namespaced_secret(record.name, namespace, body)
        except MaxRetryError as e:
            raise ClusterConnectionError(f"Failed to write secret {record.name}: {e.reason}") from e

    def resolve_namespace(self, work_project: str = AUTODETECT) -> str:
        """Work out the namespace a command should operate in.

        Args:
            work_project: A namespace pinned by the user, or ``autodetect``.

        Returns:
            The pinned namespace, the detected base project, or the
            namespace of the current context.

        """
        if work_project != AUTODETECT:
            return work_project

        detected = ""
        if self.is_openshift:
            try:
                detected = detect_current_project(self.namespace, self.list_projects())
            except ApiException as e:
                console.warning(f"Could not list projects: {e.reason}")

        return detected or self.namespace

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return (
            f"Cluster(context={self.context!r}, "
            f"namespace={self.namespace!r}, "
            f"master_type={self.master_type.value!r})"
        )
