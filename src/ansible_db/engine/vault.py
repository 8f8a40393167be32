# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
ansible-db Vault Support

Decode Ansible Vault 1.1 (AES256) envelopes holding credential records.

Envelope layout::

    FORMAT;1.1;AES256
    <hex( hex(salt) \\n hex(hmac) \\n hex(ciphertext) ) wrapped over lines>

Keys come from PBKDF2-HMAC-SHA256 over the password and salt. The HMAC is
verified before anything is decrypted; decryption is AES-256-CTR followed
by removal of the trailing padding.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import yaml
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from loguru import logger

from ansible_db.engine.credentials import Credential
from ansible_db.engine.errors import AuthenticationError, CryptoFormatError, VaultError

VAULT_VERSION = "1.1"
VAULT_CIPHER = "AES256"
VAULT_KDF_ITERATIONS = 10000
VAULT_KEY_LENGTH = 32
VAULT_IV_LENGTH = 16
VAULT_KEY_MATERIAL_LENGTH = 96


class VaultSecret:
    """Represents a vault password."""

    def __init__(self, password: Union[str, bytes]):
        if isinstance(password, bytes):
            try:
                password = password.decode('utf-8')
            except UnicodeDecodeError as e:
                raise VaultError(f"vault password is not valid UTF-8: {e.reason}") from e
        password = password.strip()
        if not password:
            raise VaultError("empty password is unsupported")
        self.password = password.encode('utf-8')

    @classmethod
    def from_file(cls, password_file: Union[str, Path]) -> VaultSecret:
        """Load the vault password from the first line of a file."""
        path = Path(password_file)
        if not path.exists():
            raise VaultError(f"Vault password file not found: {path}")
        lines = path.read_bytes().splitlines()
        return cls(lines[0] if lines else b"")

    def __repr__(self) -> str:
        return "VaultSecret(password=********)"


@dataclass(frozen=True)
class VaultHeader:
    """First line of the envelope."""

    format: str
    version: str
    cipher: str


@dataclass(frozen=True)
class VaultEnvelope:
    """A parsed, still encrypted, vault."""

    header: VaultHeader
    salt: bytes
    hmac: bytes
    ciphertext: bytes


@dataclass(frozen=True)
class DerivedKey:
    """Key material derived from password and salt. Never persisted."""

    cipher_key: bytes = field(repr=False)
    hmac_key: bytes = field(repr=False)
    iv: bytes = field(repr=False)


class VaultLib:
    """
    Ansible Vault decoder.

    Supports the 1.1 envelope with AES256, the only format written by
    ``ansible-vault`` since Ansible 2.4.
    """

    def __init__(self, secret: VaultSecret):
        self.secret = secret

    @staticmethod
    def is_encrypted(data: Union[str, bytes]) -> bool:
        """Check whether data starts with a three-field vault header."""
        if isinstance(data, bytes):
            try:
                data = data.decode('utf-8')
            except UnicodeDecodeError:
                return False
        stripped = data.strip()
        if not stripped:
            return False
        return len(stripped.splitlines()[0].strip().split(';')) == 3

    @staticmethod
    def parse_envelope(data: Union[str, bytes]) -> VaultEnvelope:
        """
        Parse the header and hex body of an envelope.

        Raises:
            CryptoFormatError: Bad header, unsupported version or cipher,
                malformed hex, or a body without exactly three parts
        """
        if isinstance(data, bytes):
            try:
                data = data.decode('utf-8')
            except UnicodeDecodeError as e:
                raise CryptoFormatError(f"Invalid vault payload encoding: {e}") from e

        lines = data.split('\n')
        fields = lines[0].strip().split(';')
        if len(fields) != 3:
            raise CryptoFormatError(f"Invalid vault header: {lines[0].strip()}")
        header = VaultHeader(format=fields[0], version=fields[1], cipher=fields[2])
        if header.version != VAULT_VERSION:
            raise CryptoFormatError(f"Unsupported vault version: {header.version}")
        if header.cipher != VAULT_CIPHER:
            raise CryptoFormatError(f"Unsupported vault cipher: {header.cipher}")
        if len(lines) < 2:
            raise CryptoFormatError("Invalid vault payload")

        body_hex = ''.join(line.strip() for line in lines[1:])
        try:
            body = binascii.unhexlify(body_hex)
        except (binascii.Error, ValueError) as e:
            raise CryptoFormatError(f"vault hex decoding error: {e}") from e

        parts = body.split(b'\n', 2)
        if len(parts) != 3:
            raise CryptoFormatError("Invalid vault body")

        decoded = []
        for name, part in zip(('salt', 'hmac', 'data'), parts):
            try:
                decoded.append(binascii.unhexlify(part))
            except (binascii.Error, ValueError) as e:
                raise CryptoFormatError(f"Invalid vault body ({name}): {e}") from e

        logger.debug("vault header accepted: {};{};{}", header.format, header.version, header.cipher)
        return VaultEnvelope(header=header, salt=decoded[0], hmac=decoded[1], ciphertext=decoded[2])

    def derive_key(self, salt: bytes) -> DerivedKey:
        """PBKDF2-HMAC-SHA256 key derivation."""
        material = hashlib.pbkdf2_hmac(
            'sha256', self.secret.password, salt, VAULT_KDF_ITERATIONS, VAULT_KEY_MATERIAL_LENGTH
        )
        return DerivedKey(
            cipher_key=material[:VAULT_KEY_LENGTH],
            hmac_key=material[VAULT_KEY_LENGTH:2 * VAULT_KEY_LENGTH],
            iv=material[2 * VAULT_KEY_LENGTH:2 * VAULT_KEY_LENGTH + VAULT_IV_LENGTH],
        )

    def decrypt(self, data: Union[str, bytes]) -> bytes:
        """
        Decrypt vault-encrypted data.

        Args:
            data: Vault encrypted content

        Returns:
            Decrypted content as bytes

        Raises:
            CryptoFormatError: The envelope or padding is malformed
            AuthenticationError: HMAC mismatch, nothing was decrypted
        """
        envelope = self.parse_envelope(data)
        key = self.derive_key(envelope.salt)

        computed_hmac = hmac.new(key.hmac_key, envelope.ciphertext, hashlib.sha256).digest()
        if not hmac.compare_digest(computed_hmac, envelope.hmac):
            raise AuthenticationError()

        decryptor = Cipher(algorithms.AES(key.cipher_key), modes.CTR(key.iv)).decryptor()
        plaintext = decryptor.update(envelope.ciphertext) + decryptor.finalize()
        return _unpad(plaintext)

    def decode(self, data: Union[str, bytes]) -> List[Credential]:
        """
        Decrypt a vault and build its credential records.

        Raises:
            CryptoFormatError: Malformed envelope or document
            AuthenticationError: Wrong password or tampered data
            PatternError: A record breaks the regex/default rule
        """
        plaintext = self.decrypt(data)
        try:
            document = yaml.safe_load(plaintext)
        except yaml.YAMLError as e:
            raise CryptoFormatError(f"error parsing YAML content of the vault: {e}") from e

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise CryptoFormatError("vault content must be a mapping with a 'credentials' list")
        records = document.get('credentials') or []
        if not isinstance(records, list):
            raise CryptoFormatError("vault 'credentials' must be a list")

        credentials = [Credential.from_dict(record, i) for i, record in enumerate(records)]
        logger.debug("vault decoded: {} credential(s)", len(credentials))
        return credentials

    def decode_file(self, file_path: Union[str, Path]) -> List[Credential]:
        """Read a vault file fully and decode it."""
        return self.decode(Path(file_path).read_bytes())


def _unpad(data: bytes) -> bytes:
    """Remove trailing padding: the last byte holds the padding length."""
    if not data:
        raise CryptoFormatError("invalid padding: empty plaintext")
    padding_len = data[-1]
    if padding_len > len(data):
        raise CryptoFormatError("invalid padding")
    return data[:len(data) - padding_len]


def decode_vault(data: Union[str, bytes], password: Union[str, bytes]) -> List[Credential]:
    """Convenience function to decode vault content with a password."""
    return VaultLib(VaultSecret(password)).decode(data)


def load_vault_file(file_path: Union[str, Path], secret: Union[VaultSecret, str]) -> List[Credential]:
    """Convenience function to load and decode a vault file."""
    if not isinstance(secret, VaultSecret):
        secret = VaultSecret(secret)
    return VaultLib(secret).decode_file(file_path)
