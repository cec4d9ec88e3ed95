"""Custom exceptions for kube-provision.

This module defines the exception hierarchy used throughout the application.
Some errors abort the whole run (decode and unknown-type errors), others only
fail the secret being provisioned.
"""


class ProvisionError(Exception):
    """Base exception for all kube-provision errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all kube-provision errors with a single
    except clause if desired.
    """

    pass


class ClusterConnectionError(ProvisionError):
    """Raised when connection to the Kubernetes cluster fails.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The cluster is unreachable
    - Authentication fails
    """

    pass


class TemplateDecodeError(ProvisionError):
    """Raised when an object embedded in a template cannot be decoded.

    Once a template decodes inconsistently its annotations can no longer
    be trusted, so the whole provisioning run is aborted.
    """

    pass


class UnknownSecretTypeError(ProvisionError):
    """Raised when a secret annotation names a kind that is not supported."""

    def __init__(self, secret_type: str) -> None:
        super().__init__(f"No matching data type for secret annotation '{secret_type}'")
        self.secret_type = secret_type


class KeyImportError(ProvisionError):
    """Raised when key material cannot be read from the local filesystem.

    Attributes:
        path: The file that could not be read.
        not_found: True when the file does not exist at all.

    """

    def __init__(self, path: str, reason: str, *, not_found: bool = False) -> None:
        super().__init__(f"Cannot import '{path}': {reason}")
        self.path = path
        self.not_found = not_found


class DefaultSettingsFetchError(ProvisionError):
    """Raised when the default maven settings document cannot be downloaded."""

    pass


class EnvironmentConfigError(ProvisionError):
    """Raised for invalid environment arguments or environments configmaps.

    This can occur when:
    - An argument is not in key=value form
    - The order is not an integer
    - A required key is missing or an unknown key is given
    - The environments configmap is missing or holds malformed YAML
    """

    pass
