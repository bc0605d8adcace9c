from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .errors import KeyMaterialError

logger = logging.getLogger(__name__)

PRIVATE_KEY_FILE = "private.pem"
PUBLIC_KEY_FILE = "public.pem"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class KeyPair:
    """PEM-encoded RSA key pair used to sign and verify tokens."""

    private_key: str
    public_key: str


def _read_pem(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise KeyMaterialError(f"Failed to load JWT keys: {e}") from e
    if not content.strip():
        raise KeyMaterialError(f"Failed to load JWT keys: {path} is empty")
    return content


# PUBLIC_INTERFACE
def load_key_pair(key_dir: str) -> KeyPair:
    """
    Read private.pem and public.pem from key_dir.

    Raises:
        KeyMaterialError if either file is missing, unreadable or empty.
    """
    pair = KeyPair(
        private_key=_read_pem(os.path.join(key_dir, PRIVATE_KEY_FILE)),
        public_key=_read_pem(os.path.join(key_dir, PUBLIC_KEY_FILE)),
    )
    logger.info("Loaded JWT key pair from %s", key_dir)
    return pair


# PUBLIC_INTERFACE
def generate_key_pair(key_dir: str, key_size: int = 2048) -> KeyPair:
    """
    Generate a fresh RSA key pair and write it to key_dir, creating the
    directory as needed. Existing files are overwritten.
    """
    private = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()

    os.makedirs(key_dir, exist_ok=True)
    with open(os.path.join(key_dir, PRIVATE_KEY_FILE), "w", encoding="utf-8") as f:
        f.write(private_pem)
    with open(os.path.join(key_dir, PUBLIC_KEY_FILE), "w", encoding="utf-8") as f:
        f.write(public_pem)
    return KeyPair(private_key=private_pem, public_key=public_pem)
