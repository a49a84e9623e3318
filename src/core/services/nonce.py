"""Nonce para Sign in with Apple.

El nonce en claro se guarda localmente; a Apple sólo viaja su SHA-256. Se usa
muestreo por rechazo sobre bytes aleatorios seguros para que cada carácter
del alfabeto tenga la misma probabilidad.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import Callable

NONCE_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVXYZabcdefghijklmnopqrstuvwxyz-._"
NONCE_LENGTH = 32


def generate_nonce(
    length: int = NONCE_LENGTH,
    *,
    charset: str = NONCE_CHARSET,
    random_bytes: Callable[[int], bytes] = secrets.token_bytes,
) -> str:
    if length <= 0:
        raise ValueError("Nonce length must be positive.")
    if not charset or len(charset) > 256:
        raise ValueError("Charset must contain between 1 and 256 characters.")

    # Bytes >= limit are discarded: 256 is not always a multiple of len(charset).
    limit = 256 - (256 % len(charset))
    out: list[str] = []
    while len(out) < length:
        for byte in random_bytes(length):
            if byte >= limit:
                continue
            out.append(charset[byte % len(charset)])
            if len(out) == length:
                break
    return "".join(out)


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
