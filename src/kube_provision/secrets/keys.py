"""Key material generation and local key storage.

Secrets are imported from a directory tree laid out as
``<key_root>/<secret name>/<file>``. When key material is missing an SSH
key pair can be generated instead, and optionally written back to the
same layout.
"""

import os
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from icecream import ic

from kube_provision.exceptions import KeyImportError
from kube_provision.models import KeyPair

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

_DIR_MODE = 0o700
_FILE_MODE = 0o600


def generate_ssh_key_pair() -> KeyPair:
    """Generate an RSA key pair usable as an SSH identity.

    Returns:
        KeyPair with the private key as a PEM ``RSA PRIVATE KEY`` block
        and the public key as a single authorized_keys line.

    """
    private_key = rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=RSA_KEY_SIZE)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_ssh = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    )

    return KeyPair(private=private_pem, public=public_ssh + b"\n")


class LocalKeyStore:
    """Reads and writes key material below a root directory.

    Attributes:
        root: Directory containing one sub-directory per secret name.

    """

    def __init__(self, root: Path | str = ".") -> None:
        self.root = Path(root)

    def path(self, name: str, file_name: str) -> Path:
        """Return the path of a key file for the given secret."""
        return self.root / name / file_name

    def read(self, name: str, file_name: str) -> bytes:
        """Read a key file.

        Args:
            name: The secret name (directory).
            file_name: The file within the secret directory.

        Returns:
            The file contents.

        Raises:
            KeyImportError: If the file cannot be read.

        """
        path = self.path(name, file_name)
        try:
            return path.read_bytes()
        except FileNotFoundError as err:
            raise KeyImportError(str(path), "no such file", not_found=True) from err
        except OSError as err:
            raise KeyImportError(str(path), err.strerror or str(err)) from err

    def write(self, name: str, file_name: str, contents: bytes) -> Path:
        """Write a key file readable by the owner only.

        The secret directory is created with mode 0700 if needed and
        the file is always (re)written with mode 0600.

        Returns:
            The path that was written.

        """
        path = self.path(name, file_name)
        path.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        ic(path)

        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(contents)
        # os.open only applies the mode to new files
        path.chmod(_FILE_MODE)
        return path

    def __repr__(self) -> str:
        return f"LocalKeyStore(root={str(self.root)!r})"
