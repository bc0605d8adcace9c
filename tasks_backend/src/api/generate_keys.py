"""
Utility script to generate the RSA key pair used to sign identity tokens.

Writes private.pem (PKCS8) and public.pem (SubjectPublicKeyInfo) into the
target directory, which defaults to JWT_KEY_DIR (or ./keys).

Usage:
    python -m src.api.generate_keys [key_dir]
"""
from __future__ import annotations

import os
import sys
from typing import List, Optional

from .keys import PRIVATE_KEY_FILE, PUBLIC_KEY_FILE, generate_key_pair
from .settings import get_settings


# PUBLIC_INTERFACE
def main(argv: Optional[List[str]] = None) -> str:
    """Generate a key pair and return the directory it was written to."""
    args = sys.argv[1:] if argv is None else argv
    key_dir = args[0] if args else get_settings().jwt_key_dir
    generate_key_pair(key_dir)
    print(f"Wrote {PRIVATE_KEY_FILE} and {PUBLIC_KEY_FILE} to: {os.path.abspath(key_dir)}")
    return key_dir


if __name__ == "__main__":
    main()
