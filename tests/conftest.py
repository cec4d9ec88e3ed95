"""Shared test fixtures for kube-provision tests."""

from unittest.mock import MagicMock, patch

import pytest

from kube_provision.models import MasterType, ProvisionOptions


def make_api_group(name):
    """Build a mock API group as returned by ApisApi.get_api_versions."""
    group = MagicMock()
    group.name = name
    return group


def make_config_map(name, data=None, labels=None):
    """Build a mock V1ConfigMap."""
    config_map = MagicMock()
    config_map.metadata.name = name
    config_map.metadata.labels = labels
    config_map.data = data
    return config_map


def replication_controller(annotations, kind="ReplicationController"):
    """Build a replication-style workload with pod template annotations."""
    return {
        "apiVersion": "v1",
        "kind": kind,
        "metadata": {"name": "jenkins"},
        "spec": {"template": {"metadata": {"annotations": annotations}}},
    }


def template(*objects, name="cd-pipeline"):
    """Build an OpenShift template holding the given objects."""
    return {"kind": "Template", "metadata": {"name": name}, "objects": list(objects)}


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        context = {"name": "test-context", "context": {"cluster": "test", "namespace": "myproject"}}
        mock.return_value = ([context], context)
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def mock_apis_api():
    """Mock API group discovery for a plain Kubernetes cluster."""
    with patch("kubernetes.client.ApisApi") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        api_instance.get_api_versions.return_value.groups = [make_api_group("apps"), make_api_group("batch")]
        yield api_instance


@pytest.fixture
def openshift_apis_api(mock_apis_api):
    """Mock API group discovery for an OpenShift cluster."""
    mock_apis_api.get_api_versions.return_value.groups = [
        make_api_group("apps"),
        make_api_group("project.openshift.io"),
        make_api_group("template.openshift.io"),
    ]
    return mock_apis_api


@pytest.fixture
def mock_core_v1_api():
    """Mock CoreV1Api."""
    with patch("kubernetes.client.CoreV1Api") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        yield api_instance


@pytest.fixture
def mock_custom_objects_api():
    """Mock CustomObjectsApi used for OpenShift projects and templates."""
    with patch("kubernetes.client.CustomObjectsApi") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        yield api_instance


@pytest.fixture
def cluster_mocks(mock_kube_contexts, mock_kube_config, mock_apis_api, mock_core_v1_api, mock_custom_objects_api):
    """Combined fixture for creating a Cluster instance without cluster access."""
    return {
        "contexts": mock_kube_contexts,
        "config": mock_kube_config,
        "apis": mock_apis_api,
        "core_api": mock_core_v1_api,
        "custom_api": mock_custom_objects_api,
    }


@pytest.fixture
def fake_cluster():
    """A stand-in for Cluster recording the calls made to it."""
    cluster = MagicMock()
    cluster.master_type = MasterType.KUBERNETES
    cluster.host = "https://127.0.0.1:6443"
    cluster.namespace = "myproject"
    cluster.list_config_maps.return_value = []
    cluster.list_templates.return_value = []
    return cluster


@pytest.fixture
def options(tmp_path):
    """Provisioning options reading key material from a temporary directory."""
    return ProvisionOptions(print_import_paths=False, key_root=tmp_path)


@pytest.fixture
def sample_catalog_yaml():
    """A catalog entry requesting an SSH key and maven settings."""
    return """apiVersion: v1
kind: ReplicationController
metadata:
  name: jenkins
spec:
  template:
    metadata:
      annotations:
        fabric8.io/secret-ssh-key: jenkins-ssh,gogs-ssh
        fabric8.io/secret-maven-settings: jenkins-maven-settings
"""
