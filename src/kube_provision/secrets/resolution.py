"""Secret data resolution.

Turns a SecretTarget into the bytes that become the secret's data, by
importing files from the local key store and, where allowed, generating
SSH keys or downloading default maven settings for whatever is missing.
"""

from collections.abc import Callable

import requests
from icecream import ic

from kube_provision import console
from kube_provision.exceptions import DefaultSettingsFetchError, KeyImportError
from kube_provision.models import (
    SECRET_KIND_FILES,
    ProvisionOptions,
    ResolvedData,
    SecretKind,
    SecretTarget,
)
from kube_provision.secrets.keys import LocalKeyStore, generate_ssh_key_pair

_SSH_PRIVATE_KEY, _SSH_PUBLIC_KEY = SECRET_KIND_FILES[SecretKind.SSH_KEY]


class SecretDataResolver:
    """Produces secret data for each supported secret kind.

    Attributes:
        options: Import and generation options for the run.
        store: Local key store the data is imported from.

    """

    def __init__(self, options: ProvisionOptions, store: LocalKeyStore | None = None) -> None:
        self.options = options
        self.store = store if store is not None else LocalKeyStore(options.key_root)
        self._strategies: dict[SecretKind, Callable[[SecretTarget], ResolvedData]] = {
            SecretKind.SSH_KEY: self._resolve_ssh_key,
            SecretKind.SSH_PUBLIC_KEY: self._resolve_ssh_public_keys,
            SecretKind.GPG_KEY: self._import_files,
            SecretKind.HUB_API_TOKEN: self._import_files,
            SecretKind.SSH_CONFIG: self._import_files,
            SecretKind.DOCKER_CFG: self._import_files,
            SecretKind.MAVEN_SETTINGS: self._resolve_maven_settings,
        }

    @property
    def supported_kinds(self) -> frozenset[SecretKind]:
        return frozenset(self._strategies)

    def resolve(self, target: SecretTarget) -> ResolvedData:
        """Produce the data for a secret.

        Args:
            target: The secret to produce data for.

        Returns:
            ResolvedData with the secret data and any files that were missing.

        Raises:
            UnknownSecretTypeError: If the target's kind is not supported.
            DefaultSettingsFetchError: If default maven settings were needed
                but could not be downloaded.

        """
        resolved = self._strategies[target.kind](target)
        ic(target.name, sorted(resolved.data), resolved.missing)
        return resolved

    def _read(self, name: str, file_name: str) -> bytes:
        if self.options.print_import_paths:
            console.step(f"Importing secret: {name}/{file_name}")
        return self.store.read(name, file_name)

    def _write_back(self, name: str, file_name: str, contents: bytes) -> None:
        if self.options.write_generated_keys:
            path = self.store.write(name, file_name, contents)
            console.info(f"Wrote generated key to {console.highlight(str(path))}")

    def _import_files(self, target: SecretTarget, *, quiet: bool = False) -> ResolvedData:
        """Import every key file, leaving unreadable ones empty.

        Unreadable files are reported as warnings unless ``quiet`` is set.
        """
        data: dict[str, bytes] = {}
        missing: list[str] = []
        for file_name in target.key_names:
            try:
                data[file_name] = self._read(target.name, file_name)
            except KeyImportError as err:
                if not quiet:
                    console.warning(f"Warning: {err}")
                data[file_name] = b""
                missing.append(f"{target.name}/{file_name}")
        return ResolvedData(data=data, missing=tuple(missing))

    def _resolve_ssh_key(self, target: SecretTarget) -> ResolvedData:
        imported = self._import_files(target, quiet=True)
        if not self.options.generate_if_missing or len(imported.missing) < len(target.key_names):
            for path in imported.missing:
                console.warning(f"Warning: Cannot import '{path}', creating the secret without it")
            return imported

        console.info(f"No secrets found on local filesystem for {target.name}, generating SSH key pair")
        keypair = generate_ssh_key_pair()
        self._write_back(target.name, _SSH_PRIVATE_KEY, keypair.private)
        self._write_back(target.name, _SSH_PUBLIC_KEY, keypair.public)
        return ResolvedData(
            data={_SSH_PRIVATE_KEY: keypair.private, _SSH_PUBLIC_KEY: keypair.public},
            generated=True,
        )

    def _resolve_ssh_public_keys(self, target: SecretTarget) -> ResolvedData:
        data: dict[str, bytes] = {}
        missing: list[str] = []
        generated = False
        for key_name in target.key_names:
            try:
                data[key_name] = self._read(target.name, key_name)
                continue
            except KeyImportError as err:
                if not self.options.generate_if_missing:
                    console.warning(f"Warning: {err}")
                    data[key_name] = b""
                    missing.append(f"{target.name}/{key_name}")
                    continue

            console.info(f"No secrets found on local filesystem for {target.name}/{key_name}, generating SSH public key")
            public_key = generate_ssh_key_pair().public
            self._write_back(target.name, key_name, public_key)
            data[key_name] = public_key
            generated = True

        return ResolvedData(data=data, missing=tuple(missing), generated=generated)

    def _resolve_maven_settings(self, target: SecretTarget) -> ResolvedData:
        (file_name,) = target.key_names
        if not self.options.generate_if_missing:
            return self._import_files(target)

        try:
            return ResolvedData(data={file_name: self._read(target.name, file_name)})
        except KeyImportError as err:
            console.warning(f"Warning: {err}")

        url = self.options.settings_url
        console.step(f"Using default maven settings from {url}")
        try:
            response = requests.get(url, timeout=self.options.fetch_timeout)
            response.raise_for_status()
        except requests.RequestException as err:
            raise DefaultSettingsFetchError(f"Cannot download default maven settings from {url}: {err}") from err

        return ResolvedData(data={file_name: response.content}, generated=True)
