"""
admin_module.py  —  Election admin key for PhaseVote.
Generates the admin keypair, loads it back with the admin PIN, and exposes
the admin identity the election is created with.
"""

import json
import os

from phasevote import crypto_utils
from phasevote.paths import CONFIG_PATH, ADMIN_DIR, ADMIN_KEY_PATH, ADMIN_PUB_PATH


def _load_config() -> dict:
    with open(CONFIG_PATH, "r", encoding="utf-8") as fh:
        return json.load(fh)


def admin_exists() -> bool:
    return os.path.exists(ADMIN_KEY_PATH) and os.path.exists(ADMIN_PUB_PATH)


def initialize_admin(pin: str, log_fn=None) -> dict:
    def _log(msg):
        if log_fn: log_fn(msg)

    if admin_exists():
        _log("Admin key already initialised. Loading existing key.")
        return {"identity": admin_identity(), "already_existed": True}

    key_bits = _load_config()["key_bits"]
    os.makedirs(ADMIN_DIR, exist_ok=True)

    _log(f"Generating admin RSA-{key_bits} key pair ...")
    private_key, public_key = crypto_utils.generate_rsa_keypair(key_bits)

    _log(f"Writing encrypted admin private key -> {ADMIN_KEY_PATH}")
    with open(ADMIN_KEY_PATH, "wb") as fh:
        fh.write(crypto_utils.serialize_private_key_encrypted(private_key, pin))

    _log(f"Writing admin public key -> {ADMIN_PUB_PATH}")
    with open(ADMIN_PUB_PATH, "wb") as fh:
        fh.write(crypto_utils.serialize_public_key(public_key))

    identity = crypto_utils.identity_from_public_key(public_key)
    _log(f"Admin initialised. Identity: {identity}")
    return {"identity": identity, "already_existed": False}


def admin_identity() -> str:
    if not os.path.exists(ADMIN_PUB_PATH):
        raise FileNotFoundError("Admin public key not found. Please initialise the admin key first.")
    with open(ADMIN_PUB_PATH, "rb") as fh:
        return crypto_utils.identity_from_public_key(crypto_utils.deserialize_public_key(fh.read()))


def load_admin_private_key(pin: str):
    """
    Raises:
        FileNotFoundError: admin key not initialised.
        ValueError: wrong PIN.
    """
    if not os.path.exists(ADMIN_KEY_PATH):
        raise FileNotFoundError("Admin private key not found. Please initialise the admin key first.")
    with open(ADMIN_KEY_PATH, "rb") as fh:
        return crypto_utils.deserialize_private_key_encrypted(fh.read(), pin)
