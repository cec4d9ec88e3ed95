"""Tests for cluster.py module."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError, NewConnectionError

from kube_provision.cluster import AUTODETECT, Cluster, label_selector
from kube_provision.exceptions import ClusterConnectionError
from kube_provision.models import MasterType, SecretRecord


class TestClusterContextSelection:
    """Tests for context selection functionality."""

    def test_set_context_without_selection(self, cluster_mocks):
        """Test using current context without selection."""
        cluster = Cluster()

        assert cluster.context == "test-context"
        assert cluster.namespace == "myproject"
        cluster_mocks["config"].assert_called_once_with(context="test-context")

    def test_context_without_namespace_uses_default(self, cluster_mocks):
        """Test falling back to the default namespace."""
        cluster_mocks["contexts"].return_value = ([{"name": "plain", "context": {}}], {"name": "plain", "context": {}})

        cluster = Cluster()

        assert cluster.namespace == "default"

    def test_set_context_with_selection(self, cluster_mocks):
        """Test prompting user for context selection."""
        contexts = [
            {"name": "context1", "context": {"namespace": "one"}},
            {"name": "context2", "context": {"namespace": "two"}},
        ]
        cluster_mocks["contexts"].return_value = (contexts, contexts[0])

        with patch("kube_provision.cluster.select_context", return_value="context2") as mock_select:
            cluster = Cluster(select=True)

        assert cluster.context == "context2"
        assert cluster.namespace == "two"
        mock_select.assert_called_once_with(["context1", "context2"])

    def test_set_context_invalid_kubeconfig(self):
        """Test error when kubeconfig is invalid or missing."""
        with patch("kubernetes.config.list_kube_config_contexts") as mock_contexts:
            mock_contexts.side_effect = ConfigException("Invalid kube-config file. No configuration found.")

            with pytest.raises(ClusterConnectionError) as exc_info:
                Cluster()

            assert "Invalid or missing kubeconfig" in str(exc_info.value)


class TestMasterTypeDetection:
    """Tests for Kubernetes vs OpenShift detection."""

    def test_kubernetes(self, cluster_mocks):
        """Test a cluster without OpenShift API groups."""
        cluster = Cluster()

        assert cluster.master_type == MasterType.KUBERNETES
        assert not cluster.is_openshift

    def test_openshift(self, cluster_mocks, openshift_apis_api):
        """Test a cluster serving the OpenShift project API group."""
        cluster = Cluster()

        assert cluster.master_type == MasterType.OPENSHIFT
        assert cluster.is_openshift

    def test_connection_error(self, cluster_mocks):
        """Test error when cluster is unreachable."""
        connection_error = NewConnectionError(None, "Failed to establish a new connection: [Errno 111] Connection refused")
        cluster_mocks["apis"].get_api_versions.side_effect = MaxRetryError(
            pool=None, url="/apis", reason=connection_error
        )

        with pytest.raises(ClusterConnectionError) as exc_info:
            Cluster()

        assert "Failed to connect" in str(exc_info.value)

    def test_discovery_rejected(self, cluster_mocks):
        """Test error when API discovery is refused."""
        cluster_mocks["apis"].get_api_versions.side_effect = ApiException(status=401, reason="Unauthorized")

        with pytest.raises(ClusterConnectionError) as exc_info:
            Cluster()

        assert "Unauthorized" in str(exc_info.value)


class TestClusterResources:
    """Tests for listing and updating resources."""

    def test_label_selector(self):
        """Test building equality label selectors."""
        assert label_selector({"provider": "fabric8.io", "kind": "catalog"}) == "provider=fabric8.io,kind=catalog"

    def test_list_config_maps(self, cluster_mocks):
        """Test listing configmaps by label."""
        config_map = MagicMock()
        cluster_mocks["core_api"].list_namespaced_config_map.return_value.items = [config_map]

        result = Cluster().list_config_maps("myproject", {"kind": "environments"})

        assert result == [config_map]
        cluster_mocks["core_api"].list_namespaced_config_map.assert_called_once_with(
            "myproject", label_selector="kind=environments"
        )

    def test_update_config_map(self, cluster_mocks):
        """Test replacing a configmap by name."""
        config_map = MagicMock()
        config_map.metadata.name = "fabric8-environments"

        Cluster().update_config_map("myproject", config_map)

        cluster_mocks["core_api"].replace_namespaced_config_map.assert_called_once_with(
            "fabric8-environments", "myproject", config_map
        )

    def test_list_config_maps_connection_lost(self, cluster_mocks):
        """Test an unreachable cluster while listing configmaps."""
        cluster_mocks["core_api"].list_namespaced_config_map.side_effect = MaxRetryError(
            pool=None, url="/api/v1/namespaces/myproject/configmaps", reason="connection refused"
        )

        with pytest.raises(ClusterConnectionError):
            Cluster().list_config_maps("myproject", {"kind": "environments"})

    def test_update_config_map_connection_lost(self, cluster_mocks):
        """Test an unreachable cluster while updating a configmap."""
        config_map = MagicMock()
        config_map.metadata.name = "fabric8-environments"
        cluster_mocks["core_api"].replace_namespaced_config_map.side_effect = MaxRetryError(
            pool=None, url="/api", reason="connection refused"
        )

        with pytest.raises(ClusterConnectionError) as exc_info:
            Cluster().update_config_map("myproject", config_map)

        assert "fabric8-environments" in str(exc_info.value)

    def test_list_projects(self, cluster_mocks):
        """Test listing OpenShift projects in API order."""
        cluster_mocks["custom_api"].list_cluster_custom_object.return_value = {
            "items": [{"metadata": {"name": "foo-che"}}, {"metadata": {"name": "foo"}}]
        }

        projects = Cluster().list_projects()

        assert [project.name for project in projects] == ["foo-che", "foo"]
        cluster_mocks["custom_api"].list_cluster_custom_object.assert_called_once_with(
            "project.openshift.io", "v1", "projects"
        )

    def test_list_templates_on_kubernetes(self, cluster_mocks):
        """Test that plain Kubernetes has no templates."""
        assert Cluster().list_templates("myproject") == []
        cluster_mocks["custom_api"].list_namespaced_custom_object.assert_not_called()

    def test_list_templates_on_openshift(self, cluster_mocks, openshift_apis_api):
        """Test listing OpenShift templates as dictionaries."""
        cluster_mocks["custom_api"].list_namespaced_custom_object.return_value = {
            "items": [{"metadata": {"name": "jenkins"}, "objects": []}]
        }

        templates = Cluster().list_templates("myproject")

        assert templates == [{"kind": "Template", "metadata": {"name": "jenkins"}, "objects": []}]


class TestApplySecret:
    """Tests for creating secrets."""

    record = SecretRecord(name="jenkins-ssh", type="fabric8.io/secret-ssh-key", data={"ssh-key": b"private"})

    def test_create_secret(self, cluster_mocks):
        """Test creating a secret with base64 encoded data."""
        Cluster().apply_secret("myproject", self.record)

        create = cluster_mocks["core_api"].create_namespaced_secret
        create.assert_called_once()
        namespace, body = create.call_args[0]
        assert namespace == "myproject"
        assert body.metadata.name == "jenkins-ssh"
        assert body.type == "fabric8.io/secret-ssh-key"
        assert base64.b64decode(body.data["ssh-key"]) == b"private"

    def test_existing_secret_is_replaced(self, cluster_mocks):
        """Test that a conflict on create replaces the secret."""
        cluster_mocks["core_api"].create_namespaced_secret.side_effect = ApiException(status=409, reason="Conflict")

        Cluster().apply_secret("myproject", self.record)

        replace = cluster_mocks["core_api"].replace_namespaced_secret
        replace.assert_called_once()
        assert replace.call_args[0][:2] == ("jenkins-ssh", "myproject")

    def test_other_errors_propagate(self, cluster_mocks):
        """Test that rejections other than conflicts are raised."""
        cluster_mocks["core_api"].create_namespaced_secret.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(ApiException):
            Cluster().apply_secret("myproject", self.record)

        cluster_mocks["core_api"].replace_namespaced_secret.assert_not_called()

    def test_connection_lost(self, cluster_mocks):
        """Test a dropped connection becomes a cluster connection error."""
        cluster_mocks["core_api"].create_namespaced_secret.side_effect = MaxRetryError(
            pool=None, url="/api/v1/namespaces/myproject/secrets", reason="connection reset"
        )

        with pytest.raises(ClusterConnectionError) as exc_info:
            Cluster().apply_secret("myproject", self.record)

        assert "jenkins-ssh" in str(exc_info.value)

    def test_connection_lost_while_replacing(self, cluster_mocks):
        """Test a dropped connection during the replace is mapped too."""
        core_api = cluster_mocks["core_api"]
        core_api.create_namespaced_secret.side_effect = ApiException(status=409, reason="Conflict")
        core_api.replace_namespaced_secret.side_effect = MaxRetryError(pool=None, url="/api", reason="timeout")

        with pytest.raises(ClusterConnectionError):
            Cluster().apply_secret("myproject", self.record)


class TestResolveNamespace:
    """Tests for namespace resolution."""

    def test_pinned_work_project(self, cluster_mocks, openshift_apis_api):
        """Test that a pinned namespace skips detection."""
        assert Cluster().resolve_namespace("team-a") == "team-a"
        cluster_mocks["custom_api"].list_cluster_custom_object.assert_not_called()

    def test_kubernetes_uses_context_namespace(self, cluster_mocks):
        """Test that plain Kubernetes uses the context namespace."""
        assert Cluster().resolve_namespace(AUTODETECT) == "myproject"

    def test_openshift_detects_base_project(self, cluster_mocks, openshift_apis_api):
        """Test detecting the base project on OpenShift."""
        cluster_mocks["contexts"].return_value = (
            [{"name": "os", "context": {"namespace": "bar-che"}}],
            {"name": "os", "context": {"namespace": "bar-che"}},
        )
        cluster_mocks["custom_api"].list_cluster_custom_object.return_value = {
            "items": [{"metadata": {"name": name}} for name in ("foo-che", "bar-che", "foo", "bar")]
        }

        assert Cluster().resolve_namespace() == "bar"

    def test_openshift_undetermined_falls_back(self, cluster_mocks, openshift_apis_api):
        """Test falling back to the context namespace when detection fails."""
        cluster_mocks["custom_api"].list_cluster_custom_object.return_value = {
            "items": [{"metadata": {"name": "foo-che"}}, {"metadata": {"name": "myproject"}}]
        }

        assert Cluster().resolve_namespace() == "myproject"

    def test_openshift_project_listing_failure(self, cluster_mocks, openshift_apis_api):
        """Test falling back with a warning when projects cannot be listed."""
        cluster_mocks["custom_api"].list_cluster_custom_object.side_effect = ApiException(status=403, reason="Forbidden")

        with patch("kube_provision.cluster.console") as mock_console:
            namespace = Cluster().resolve_namespace()

        assert namespace == "myproject"
        mock_console.warning.assert_called_once()
