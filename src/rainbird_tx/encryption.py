#!/usr/bin/env python3
"""RainBird - the encryption of the SIP tunnel.

The controller has no handshake: both sides derive an AES-256 key from the shared
password (its sha256 digest). A request body is:
    sha256(request) | iv (16 bytes) | aes_cbc(key, iv, padded request)

The padding is not PKCS#7: after appending 0x00 0x10, it is padded with as many 0x10
bytes as are needed to fill the block (a whole block if it is already full).
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes

from . import exceptions as exc
from .const import (
    BLOCK_SIZE,
    HASH_LENGTH,
    IV_LENGTH,
    PAD_CHAR,
    REQUEST_SUFFIX,
    RPC_ID,
    RPC_METHOD,
    RPC_VERSION,
    STRIP_CHARS,
    SZ_DATA,
    SZ_ID,
    SZ_JSONRPC,
    SZ_LENGTH,
    SZ_METHOD,
    SZ_PARAMS,
)

if TYPE_CHECKING:
    from .command import Command


def derive_key(password: str) -> bytes:
    """Return the (32 byte) AES key for a password."""
    return hashlib.sha256(password.encode("utf-8")).digest()


def add_padding(data: bytes) -> bytes:
    """Pad data to a multiple of the block size, using PAD_CHAR only."""
    return data + bytes([PAD_CHAR]) * (BLOCK_SIZE - len(data) % BLOCK_SIZE)


def strip_padding(data: bytes) -> bytes:
    """Remove the trailing control characters (padding, newline, nulls)."""
    return data.rstrip(STRIP_CHARS)


def encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """Return the ciphertext of the (suffixed and padded) plaintext."""

    cipher = AES.new(key, AES.MODE_CBC, iv)
    return cipher.encrypt(add_padding(plaintext + REQUEST_SUFFIX.encode("utf-8")))


def decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """Return the plaintext of the ciphertext, with its padding stripped."""

    if len(ciphertext) % BLOCK_SIZE:
        raise exc.TransportError(
            f"Ciphertext is not a multiple of the block size ({len(ciphertext)} bytes)"
        )

    cipher = AES.new(key, AES.MODE_CBC, iv)
    return strip_padding(cipher.decrypt(ciphertext))


def format_request(cmd: Command) -> str:
    """Return the JSON-RPC envelope of a command (the formatted request)."""

    frame = cmd.encode()
    return json.dumps(
        {
            SZ_ID: RPC_ID,
            SZ_JSONRPC: RPC_VERSION,
            SZ_METHOD: RPC_METHOD,
            SZ_PARAMS: {SZ_DATA: frame.hex(), SZ_LENGTH: len(frame)},
        },
        separators=(",", ":"),
    )


def encode_request(cmd: Command, password: str, iv: bytes | None = None) -> bytes:
    """Return the body of the POST for a command (hash, iv, ciphertext)."""

    iv = iv or get_random_bytes(IV_LENGTH)
    request = format_request(cmd).encode("utf-8")

    return (
        hashlib.sha256(request).digest()
        + iv
        + encrypt(request, derive_key(password), iv)
    )


def decode_response(body: bytes, password: str) -> dict[str, Any]:
    """Return the JSON-RPC envelope of the body of a response.

    Raise TransportError if it cannot be decrypted/parsed into a JSON object.
    """

    if len(body) < HASH_LENGTH + IV_LENGTH:
        raise exc.TransportError(f"Response is too short ({len(body)} bytes)")

    iv = body[HASH_LENGTH : HASH_LENGTH + IV_LENGTH]
    plaintext = decrypt(body[HASH_LENGTH + IV_LENGTH :], derive_key(password), iv)

    try:
        result = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as err:
        raise exc.TransportAuthError(f"Response is not valid JSON: {err}") from err

    if not isinstance(result, dict):
        raise exc.TransportError(f"Response is not a JSON object: {result}")
    return result
