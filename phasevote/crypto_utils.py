"""
crypto_utils.py
===============
Cryptographic helpers for PhaseVote.

Provides:
  - RSA key-pair generation for the admin and for voters
  - PIN-protected private-key storage format (PKCS8, BestAvailableEncryption)
  - Identity derivation: public key -> address-like "0x..." identity
  - Canonical JSON encoding shared by signed commands and the audit log
  - Command payload construction, RSA-PSS signing and verification

All cryptographic work is done with the `cryptography` library (pyca).
"""

import hashlib
import json
import secrets
from datetime import datetime, timezone

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa, padding
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PrivateFormat,
    PublicFormat,
    BestAvailableEncryption,
)

_PSS = padding.PSS(
    mgf=padding.MGF1(hashes.SHA256()),
    salt_length=padding.PSS.MAX_LENGTH,
)

# ------------------------------------------------------------------ #
#  Keys                                                                #
# ------------------------------------------------------------------ #

def generate_rsa_keypair(key_bits: int = 2048):
    """Return (private_key, public_key) for a fresh RSA key."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_bits,
    )
    return private_key, private_key.public_key()


def serialize_private_key_encrypted(private_key, pin: str) -> bytes:
    """PEM-encode *private_key* encrypted under the owner's PIN."""
    return private_key.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=BestAvailableEncryption(pin.encode("utf-8")),
    )


def deserialize_private_key_encrypted(pem_bytes: bytes, pin: str):
    """
    Decrypt a PIN-protected PEM private key.

    Raises:
        ValueError: If the PIN is wrong or the data is corrupt.
    """
    try:
        return serialization.load_pem_private_key(pem_bytes, password=pin.encode("utf-8"))
    except (ValueError, TypeError) as exc:
        raise ValueError("Failed to decrypt private key. Wrong PIN?") from exc


def serialize_public_key(public_key) -> bytes:
    return public_key.public_bytes(
        encoding=Encoding.PEM,
        format=PublicFormat.SubjectPublicKeyInfo,
    )


def deserialize_public_key(pem_bytes: bytes):
    if isinstance(pem_bytes, str):
        pem_bytes = pem_bytes.encode("ascii")
    return serialization.load_pem_public_key(pem_bytes)


def identity_from_public_key(public_key) -> str:
    """
    Derive the voter/admin identity from a public key.

    Formula: "0x" + first 40 hex chars of SHA256(DER SubjectPublicKeyInfo)

    The same key always yields the same identity, so whoever can sign with
    the private key is the holder of that identity.
    """
    der = public_key.public_bytes(
        encoding=Encoding.DER,
        format=PublicFormat.SubjectPublicKeyInfo,
    )
    return "0x" + sha256_hex(der)[:40]


# ------------------------------------------------------------------ #
#  SHA-256 / canonical JSON                                            #
# ------------------------------------------------------------------ #

def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_of_string(text: str) -> str:
    return sha256_hex(text.encode("utf-8"))


def payload_to_bytes(payload: dict) -> bytes:
    """Deterministically serialise a payload dict to UTF-8 bytes."""
    return json.dumps(payload, sort_keys=True, ensure_ascii=True).encode("utf-8")


def hash_payload(payload: dict) -> str:
    return sha256_hex(payload_to_bytes(payload))


# ------------------------------------------------------------------ #
#  Signed commands                                                     #
# ------------------------------------------------------------------ #

def build_command_payload(election_id: str, action: str, args: dict = None, nonce: str = None) -> dict:
    """
    Construct the payload a caller signs to run *action* on an election.

    Returns:
        dict with keys: election_id, action, args, timestamp, nonce.
    """
    if nonce is None:
        nonce = secrets.token_hex(16)
    return {
        "election_id": election_id,
        "action": action,
        "args": dict(args or {}),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "nonce": nonce,
    }


def sign_payload(private_key, payload: dict) -> bytes:
    """Sign the canonical payload bytes with RSA-PSS (SHA-256, MGF1)."""
    return private_key.sign(payload_to_bytes(payload), _PSS, hashes.SHA256())


def verify_signature(public_key, payload: dict, signature: bytes) -> bool:
    try:
        public_key.verify(signature, payload_to_bytes(payload), _PSS, hashes.SHA256())
        return True
    except (InvalidSignature, TypeError, ValueError):
        return False


def sign_command(private_key, election_id: str, action: str, **args) -> tuple:
    """
    Build and sign a command in one step.

    Returns:
        (payload, signature, public_key_pem) ready for ElectionHost.submit().
    """
    payload = build_command_payload(election_id, action, args)
    signature = sign_payload(private_key, payload)
    return payload, signature, serialize_public_key(private_key.public_key())


def describe_key(private_key) -> str:
    """Return a human-readable string describing a private key."""
    identity = identity_from_public_key(private_key.public_key())
    return f"RSA-{private_key.key_size} | identity: {identity}"
