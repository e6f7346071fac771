"""
storage.py  —  Local key storage for PhaseVote identities.

Stores keys in:
  $PHASEVOTE_HOME/keys/<identity>/        (if PHASEVOTE_HOME is set)
  Windows  : %APPDATA%\\PhaseVote\\keys\\<identity>\\
  Linux/Mac: ~/.phasevote/keys/<identity>/

Files stored per identity:
  private_key.pem.enc  (PIN-encrypted PKCS8 private key)
  public_key.pem       (SubjectPublicKeyInfo)
  meta.json            (identity, label, key size, created_at)
"""

import json
import os
import platform
import shutil
from datetime import datetime, timezone


def _get_root_dir() -> str:
    override = os.environ.get("PHASEVOTE_HOME")
    if override:
        root = os.path.join(override, "keys")
    elif platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", os.path.expanduser("~"))
        root = os.path.join(appdata, "PhaseVote", "keys")
    else:
        root = os.path.join(os.path.expanduser("~"), ".phasevote", "keys")
    os.makedirs(root, exist_ok=True)
    return root


def get_identity_dir(identity: str) -> str:
    path = os.path.join(_get_root_dir(), identity)
    os.makedirs(path, exist_ok=True)
    return path


def _private_key_path(identity):
    return os.path.join(get_identity_dir(identity), "private_key.pem.enc")

def _public_key_path(identity):
    return os.path.join(get_identity_dir(identity), "public_key.pem")

def _meta_path(identity):
    return os.path.join(get_identity_dir(identity), "meta.json")


def save_keys(identity: str, encrypted_pem: bytes, public_pem: bytes, label: str = "", key_size: int = 0) -> None:
    with open(_private_key_path(identity), "wb") as fh:
        fh.write(encrypted_pem)
    with open(_public_key_path(identity), "wb") as fh:
        fh.write(public_pem)
    meta = {
        "identity": identity,
        "label": label,
        "key_size": key_size,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    with open(_meta_path(identity), "w", encoding="utf-8") as fh:
        json.dump(meta, fh, indent=2)


def load_private_key_bytes(identity: str) -> bytes:
    path = _private_key_path(identity)
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"No private key found for identity {identity}.\n"
            f"Expected at: {path}\nPlease create an identity first."
        )
    with open(path, "rb") as fh:
        return fh.read()


def load_meta(identity: str) -> dict:
    path = _meta_path(identity)
    if not os.path.exists(path):
        raise FileNotFoundError(f"No meta file found at: {path}")
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def list_identities() -> list:
    root = _get_root_dir()
    return sorted(
        name for name in os.listdir(root)
        if os.path.exists(os.path.join(root, name, "private_key.pem.enc"))
    )


def delete_identity(identity: str) -> None:
    path = os.path.join(_get_root_dir(), identity)
    if os.path.isdir(path):
        shutil.rmtree(path, ignore_errors=True)


def credentials_exist(identity: str) -> bool:
    return (
        os.path.exists(_private_key_path(identity))
        and os.path.exists(_public_key_path(identity))
    )
