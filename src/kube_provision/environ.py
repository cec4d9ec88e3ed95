"""Environments stored in the environments configmap.

All environments of a namespace live in a single configmap labelled
``kind=environments``, one YAML document per environment keyed by its name::

    data:
      staging: |
        name: staging
        namespace: myproject-stage
        order: 0
"""

from collections.abc import Iterator, Sequence
from typing import Any

import yaml
from icecream import ic

from kube_provision import console
from kube_provision.cluster import Cluster
from kube_provision.exceptions import EnvironmentConfigError
from kube_provision.models import EnvironmentEntry

ENVIRONMENTS_LABELS = {"kind": "environments"}


def parse_environment(key: str, text: str) -> EnvironmentEntry:
    """Decode an environment stored under ``key``.

    Raises:
        EnvironmentConfigError: If the entry is not a valid environment.

    """
    try:
        doc = yaml.safe_load(text) or {}
    except yaml.YAMLError as err:
        raise EnvironmentConfigError(f"Environment {key} holds malformed YAML: {err}") from err
    if not isinstance(doc, dict):
        raise EnvironmentConfigError(f"Environment {key} is not a YAML mapping")

    try:
        order = int(doc.get("order", 0))
    except (TypeError, ValueError) as err:
        raise EnvironmentConfigError(f"Environment {key} has a non-numeric order: {doc.get('order')!r}") from err

    return EnvironmentEntry(
        name=str(doc.get("name", "")),
        namespace=str(doc.get("namespace", "")),
        order=order,
    )


def parse_environment_args(args: Sequence[str]) -> EnvironmentEntry:
    """Build an environment from ``key=value`` command-line arguments.

    Recognised keys are ``name``, ``namespace`` and ``order``, in any case.
    The name is lower-cased.

    Raises:
        EnvironmentConfigError: If an argument is malformed, unknown or missing.

    """
    values: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep:
            raise EnvironmentConfigError(f"Invalid argument {arg} you are missing an assignment like foo=bar")
        key = key.lower()
        if key not in ("name", "namespace", "order"):
            raise EnvironmentConfigError(f"Unknown key: {key}")
        values[key] = value

    missing = [key for key in ("name", "namespace", "order") if not values.get(key)]
    if missing:
        raise EnvironmentConfigError(f"Missing some key=value: {', '.join(missing)}")

    try:
        order = int(values["order"])
    except ValueError as err:
        raise EnvironmentConfigError(f"Cannot use {values['order']} from order as number") from err

    return EnvironmentEntry(name=values["name"].lower(), namespace=values["namespace"], order=order)


def _environment_config_maps(cluster: Cluster, namespace: str) -> list[Any]:
    return cluster.list_config_maps(namespace, ENVIRONMENTS_LABELS)


def list_environments(cluster: Cluster, namespace: str) -> list[tuple[str, EnvironmentEntry]]:
    """List the environments of a namespace.

    Returns:
        ``(key, entry)`` pairs sorted by order, then key.

    """
    environments = [
        (key, parse_environment(key, text))
        for config_map in _environment_config_maps(cluster, namespace)
        for key, text in (config_map.data or {}).items()
    ]
    return sorted(environments, key=lambda item: (item[1].order, item[0]))


def create_environment(cluster: Cluster, namespace: str, entry: EnvironmentEntry) -> None:
    """Add or overwrite an environment in the environments configmap.

    Raises:
        EnvironmentConfigError: If the namespace has no environments configmap.

    """
    config_maps = _environment_config_maps(cluster, namespace)
    if not config_maps:
        raise EnvironmentConfigError(f"No configmap labelled kind=environments in namespace {namespace}")
    if len(config_maps) > 1:
        console.warning(
            f"Found {len(config_maps)} environments configmaps, using {console.highlight(config_maps[0].metadata.name)}"
        )

    config_map = config_maps[0]
    if config_map.data is None:
        config_map.data = {}
    config_map.data[entry.name] = yaml.safe_dump(entry.to_dict(), sort_keys=False)
    ic(config_map.metadata.name, entry)
    cluster.update_config_map(namespace, config_map)


def _entries(config_maps: Sequence[Any]) -> Iterator[tuple[Any, str, EnvironmentEntry]]:
    for config_map in config_maps:
        for key, text in (config_map.data or {}).items():
            yield config_map, key, parse_environment(key, text)


def delete_environment(cluster: Cluster, namespace: str, name: str) -> bool:
    """Remove the first environment whose name matches, ignoring case.

    Returns:
        True if an environment was removed, False if none matched.

    """
    wanted = name.lower()
    found = next(
        (
            (config_map, key)
            for config_map, key, entry in _entries(_environment_config_maps(cluster, namespace))
            if entry.name.lower() == wanted
        ),
        None,
    )
    if found is None:
        return False

    config_map, key = found
    del config_map.data[key]
    cluster.update_config_map(namespace, config_map)
    return True
