"""
Unit Test Fixtures

Sample inventory text and a builder producing real Ansible Vault 1.1
envelopes so the decoder runs against genuine AES-CTR/HMAC data.
"""

import binascii
import hashlib
import hmac
import os
from pathlib import Path
from typing import Callable, Optional

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from loguru import logger


SAMPLE_INVENTORY = """\
# NY datacenter
controller ansible_connection=local

[ny-core]
ny-sw01 os=cisco_nxos
ny-sw02 os=cisco_nxos

[ny-access]
ny-sw03 os=arista_eos descr=access switch rack 3

[ny:children]
ny-core
ny-access

[dc:children]
ny

[ny:vars]
site=ny
ntp=10.0.0.1

[dc:vars]
site=global
domain=example.net

[all:vars]
ansible_user=netops
"""

SAMPLE_CREDENTIALS = """\
credentials:
- description: NX-OS switches
  regex: "^ny-sw"
  username: admin
  password: nxos-secret
  password_enable: enable-secret
  priority: 10
- description: NY devices
  regex: "^ny-"
  username: netops
  password: ny-secret
  priority: 1
- description: fallback
  default: true
  username: root
  password: default-secret
  priority: 5
- description: break glass
  default: true
  username: breakglass
  password: bg-secret
  priority: 1
"""

VAULT_PASSWORD = "7f017fde-e88b-42c5-89df-a7c8f9de981d"


def build_vault(
    plaintext: bytes,
    password: str = VAULT_PASSWORD,
    header: str = "$ANSIBLE_VAULT;1.1;AES256",
    salt: Optional[bytes] = None,
    pad: bool = True,
) -> str:
    """Encrypt ``plaintext`` the way ansible-vault does."""
    salt = salt if salt is not None else os.urandom(32)
    material = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, 10000, 80)
    key, hmac_key, iv = material[:32], material[32:64], material[64:80]

    if pad:
        pad_len = 16 - len(plaintext) % 16
        plaintext = plaintext + bytes([pad_len]) * pad_len

    encryptor = Cipher(algorithms.AES(key), modes.CTR(iv)).encryptor()
    ciphertext = encryptor.update(plaintext) + encryptor.finalize()
    digest = hmac.new(hmac_key, ciphertext, hashlib.sha256).digest()

    body = b"\n".join(binascii.hexlify(part) for part in (salt, digest, ciphertext))
    body_hex = binascii.hexlify(body).decode('ascii')
    lines = [body_hex[i:i + 80] for i in range(0, len(body_hex), 80)]
    return header + "\n" + "\n".join(lines) + "\n"


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop loguru sinks added by a test and silence the library again."""
    yield
    logger.remove()
    logger.disable("ansible_db")


@pytest.fixture
def sample_inventory() -> str:
    return SAMPLE_INVENTORY


@pytest.fixture
def vault_password() -> str:
    return VAULT_PASSWORD


@pytest.fixture
def vault_builder() -> Callable[..., str]:
    return build_vault


@pytest.fixture
def sample_vault() -> str:
    """Vault holding two pattern and two default credentials."""
    return build_vault(SAMPLE_CREDENTIALS.encode('utf-8'))


@pytest.fixture
def inventory_file(tmp_path: Path) -> Path:
    path = tmp_path / "hosts"
    path.write_text(SAMPLE_INVENTORY)
    return path


@pytest.fixture
def vault_files(tmp_path: Path, sample_vault: str):
    """Write the sample vault and its key file; return (vault, key)."""
    vault_file = tmp_path / "vault.yml"
    vault_file.write_text(sample_vault)
    key_file = tmp_path / "vault.key"
    key_file.write_text(VAULT_PASSWORD + "\nignored second line\n")
    return vault_file, key_file
