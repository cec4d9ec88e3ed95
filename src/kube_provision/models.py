"""Data models for kube-provision.

This module provides type-safe data structures for the application,
replacing loosely-typed dictionaries with proper Python data classes.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from kube_provision.exceptions import UnknownSecretTypeError

DEFAULT_MAVEN_SETTINGS_URL = "https://raw.githubusercontent.com/fabric8io/gofabric8/master/default-secrets/mvnsettings.xml"
DEFAULT_FETCH_TIMEOUT = 30.0


class MasterType(str, Enum):
    """Flavour of the control plane we are talking to."""

    KUBERNETES = "Kubernetes"
    OPENSHIFT = "OpenShift"


class SecretKind(str, Enum):
    """Secret kinds that can be requested through pod template annotations.

    The annotation key has the shape ``<prefix>/<kind>``, for example
    ``fabric8.io/secret-ssh-key``. Only the part after the last slash
    selects how the secret data is produced.
    """

    SSH_KEY = "secret-ssh-key"
    SSH_PUBLIC_KEY = "secret-ssh-public-key"
    GPG_KEY = "secret-gpg-key"
    MAVEN_SETTINGS = "secret-maven-settings"
    DOCKER_CFG = "secret-docker-cfg"
    HUB_API_TOKEN = "secret-hub-api-token"
    SSH_CONFIG = "secret-ssh-config"

    @classmethod
    def from_secret_type(cls, secret_type: str) -> "SecretKind":
        """Parse the kind tag out of a raw secret type annotation.

        Raises:
            UnknownSecretTypeError: If the tag is not a supported kind.

        """
        tag = secret_type.rsplit("/", 1)[-1]
        try:
            return cls(tag)
        except ValueError:
            raise UnknownSecretTypeError(secret_type) from None


# Files read from <key_root>/<secret name>/ for each kind
SECRET_KIND_FILES: dict[SecretKind, tuple[str, ...]] = {
    SecretKind.SSH_KEY: ("ssh-key", "ssh-key.pub"),
    SecretKind.SSH_PUBLIC_KEY: ("ssh-key.pub",),
    SecretKind.GPG_KEY: ("gpg.conf", "secring.gpg", "pubring.gpg", "trustdb.gpg"),
    SecretKind.MAVEN_SETTINGS: ("settings.xml",),
    SecretKind.DOCKER_CFG: ("config.json",),
    SecretKind.HUB_API_TOKEN: ("hub",),
    SecretKind.SSH_CONFIG: ("config",),
}


class Project(NamedTuple):
    """An OpenShift project as seen by the current user."""

    name: str


class SecretRequirement(NamedTuple):
    """A secret requirement extracted from a single annotation.

    Attributes:
        secret_type: The annotation key, e.g. ``fabric8.io/secret-ssh-key``.
        identifiers: The annotation value naming the secret(s) to create.

    """

    secret_type: str
    identifiers: str

    @property
    def kind(self) -> SecretKind:
        return SecretKind.from_secret_type(self.secret_type)


class SecretTarget(NamedTuple):
    """A single secret to create for a requirement.

    Attributes:
        name: Secret name, also the directory holding its local key material.
        secret_type: The raw annotation key, used as the secret type.
        key_names: File names that become keys of the secret data.

    """

    name: str
    secret_type: str
    key_names: tuple[str, ...]

    @property
    def kind(self) -> SecretKind:
        return SecretKind.from_secret_type(self.secret_type)


class KeyPair(NamedTuple):
    """A freshly generated private/public key pair."""

    private: bytes
    public: bytes


@dataclass(frozen=True, slots=True)
class SecretRecord:
    """Secret object ready to be persisted to the cluster.

    Attributes:
        name: The secret name.
        type: The raw secret type string.
        data: Mapping of key name to raw (not base64 encoded) bytes.

    """

    name: str
    type: str
    data: dict[str, bytes]


@dataclass(frozen=True, slots=True)
class ProvisionOptions:
    """Options controlling how secret data is imported or generated.

    Attributes:
        print_import_paths: Print every local path before it is read.
        write_generated_keys: Write generated key material back to disk.
        generate_if_missing: Generate (or download) data that cannot be imported.
        key_root: Directory containing one sub-directory per secret name.
        settings_url: Where the default maven settings are downloaded from.
        fetch_timeout: Timeout in seconds for the settings download.

    """

    print_import_paths: bool = True
    write_generated_keys: bool = False
    generate_if_missing: bool = True
    key_root: Path = Path(".")
    settings_url: str = DEFAULT_MAVEN_SETTINGS_URL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT


class ResolvedData(NamedTuple):
    """Secret payload produced by the resolver.

    Attributes:
        data: Mapping of key name to bytes.
        missing: Relative paths that could not be imported.
        generated: True if any of the data was generated or downloaded.

    """

    data: dict[str, bytes]
    missing: tuple[str, ...] = ()
    generated: bool = False

    @property
    def complete(self) -> bool:
        return not self.missing


class SecretOutcome(NamedTuple):
    """Result of provisioning a single secret."""

    name: str
    secret_type: str
    success: bool
    error: str = ""
    missing: tuple[str, ...] = ()


@dataclass(slots=True)
class ProvisionResult:
    """Outcome of a provisioning run."""

    outcomes: list[SecretOutcome] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)


@dataclass(frozen=True, slots=True)
class EnvironmentEntry:
    """An environment stored in the environments configmap.

    Attributes:
        name: Environment name, also the configmap data key.
        namespace: Namespace the environment deploys to.
        order: Position of the environment in the promotion pipeline.

    """

    name: str
    namespace: str
    order: int

    def to_dict(self) -> dict[str, str | int]:
        return {"name": self.name, "namespace": self.namespace, "order": self.order}


class PackageInfo(NamedTuple):
    """An installed package configmap."""

    name: str
    version: str
