"""
workflows.py  —  Admin and voter workflows for PhaseVote.

Each workflow narrates its steps through an optional `log_fn` and returns
a result dict with "success" and "message" keys, ready for the GUI.
"""

import csv
import json
import os
import traceback

from phasevote import admin_module, crypto_utils, db, storage
from phasevote.election import Election
from phasevote.host import ElectionHost
from phasevote.paths import PROJECT_ROOT, CONFIG_PATH, VOTERS_CSV, CANDIDATES_CSV, AUDIT_LOG_PATH


def _load_config() -> dict:
    with open(CONFIG_PATH, "r", encoding="utf-8") as fh:
        return json.load(fh)


# ── CSV Utilities ────────────────────────────────────────────────────

def _csv_path(key: str, default: str) -> str:
    """Path from config.json (relative to the project root), else *default*."""
    configured = _load_config().get(key)
    if not configured:
        return default
    return os.path.join(PROJECT_ROOT, configured)


def load_candidates_csv(csv_path: str = None) -> list:
    path = csv_path or _csv_path("candidates_csv", CANDIDATES_CSV)
    with open(path, newline="", encoding="utf-8") as fh:
        return [(row.get("name") or "").strip() for row in csv.DictReader(fh)]


def load_voters_csv(csv_path: str = None) -> list:
    path = csv_path or _csv_path("voters_csv", VOTERS_CSV)
    with open(path, newline="", encoding="utf-8") as fh:
        return [(row.get("identity") or "").strip() for row in csv.DictReader(fh)]


# ── Election bootstrap ───────────────────────────────────────────────

def open_election(log_fn=None) -> ElectionHost:
    """
    Build the host for the configured election, restoring it from MySQL
    when persistence is enabled and a stored copy exists.
    """
    def _log(msg):
        if log_fn: log_fn(msg)

    cfg = _load_config()
    election_id = cfg["election_id"]
    admin = admin_module.admin_identity()

    if not cfg.get("persist"):
        _log(f"Opened in-memory election {election_id} (persistence disabled).")
        return ElectionHost(Election(election_id, admin))

    _log(f"Loading election {election_id} from database ...")
    stored = db.load_state(election_id)
    if stored is None:
        _log("No stored election found. Creating a new one.")
        election = Election(election_id, admin)
    else:
        state, log = stored
        ok, bad_seq = log.verify_chain()
        if not ok:
            raise RuntimeError(f"Stored audit log is corrupt at event #{bad_seq}.")
        _log(f"Restored phase={state.phase.value}, {len(log)} audit events, chain verified.")
        election = Election.from_state(state, log)
    seen = db.load_nonces(election_id)
    _log(f"Loaded {len(seen)} spent command nonces.")
    return ElectionHost(election, persist=db.save_state, seen_nonces=seen)


# ── Identities ───────────────────────────────────────────────────────

def create_voter_identity(pin: str, label: str = "", log_fn=None) -> dict:
    def _log(msg):
        if log_fn: log_fn(msg)

    key_bits = _load_config()["key_bits"]
    try:
        _log(f"Generating RSA-{key_bits} key pair ...")
        private_key, public_key = crypto_utils.generate_rsa_keypair(key_bits)
        identity = crypto_utils.identity_from_public_key(public_key)
        _log(f"Identity derived: {identity}")

        _log("Encrypting private key with PIN and saving ...")
        storage.save_keys(
            identity,
            crypto_utils.serialize_private_key_encrypted(private_key, pin),
            crypto_utils.serialize_public_key(public_key),
            label=label,
            key_size=key_bits,
        )
        key_dir = storage.get_identity_dir(identity)
        _log(f"Keys saved to: {key_dir}")
        return {
            "success": True,
            "message": f"Identity created: {identity}. Give it to the admin for authorization.",
            "identity": identity,
            "key_dir": key_dir,
        }
    except OSError as exc:
        _log(f"Identity creation FAILED: {exc}")
        return {"success": False, "message": str(exc)}


# ── Signed commands ──────────────────────────────────────────────────

def _submit(host, private_key, action, log_fn, **args) -> dict:
    payload, signature, pub_pem = crypto_utils.sign_command(private_key, host.election_id, action, **args)
    return host.submit(payload, signature, pub_pem, log_fn=log_fn)


def admin_command(host, pin: str, action: str, log_fn=None, **args) -> dict:
    def _log(msg):
        if log_fn: log_fn(msg)

    try:
        _log("Unlocking admin key ...")
        private_key = admin_module.load_admin_private_key(pin)
    except FileNotFoundError as exc:
        return {"success": False, "error": "NoAdminKey", "message": str(exc)}
    except ValueError as exc:
        return {"success": False, "error": "BadPin", "message": str(exc)}

    _log(f"Signing '{action}' command ...")
    return _submit(host, private_key, action, log_fn, **args)


def cast_vote(host, identity: str, pin: str, candidate_id, log_fn=None) -> dict:
    def _log(msg):
        if log_fn: log_fn(msg)

    try:
        _log("Loading encrypted private key ...")
        encrypted_pem = storage.load_private_key_bytes(identity)
        _log("Decrypting private key with PIN ...")
        private_key = crypto_utils.deserialize_private_key_encrypted(encrypted_pem, pin)
        _log(crypto_utils.describe_key(private_key))
    except FileNotFoundError as exc:
        return {"success": False, "error": "NoIdentity", "message": str(exc)}
    except ValueError as exc:
        return {"success": False, "error": "BadPin", "message": f"Decryption error: {exc}"}

    try:
        candidate_id = int(candidate_id)
    except (TypeError, ValueError):
        return {"success": False, "error": "NotFound", "message": f"Invalid candidate id: {candidate_id!r}"}

    _log(f"Signing vote for candidate #{candidate_id} ...")
    result = _submit(host, private_key, "vote", log_fn, candidate_id=candidate_id)
    if result["success"]:
        _log("=" * 50)
        _log(f"Vote CAST for candidate #{candidate_id}")
        _log(f"Audit head : {host.election.sink.head_hash}")
        _log("=" * 50)
    return result


def import_from_csv(host, pin: str, candidates_path: str = None, voters_path: str = None, log_fn=None) -> dict:
    """
    Register every candidate from the candidates CSV, then authorize the
    voters CSV as one batch. Bad or duplicate voter rows are skipped.
    """
    def _log(msg):
        if log_fn: log_fn(msg)

    try:
        names = load_candidates_csv(candidates_path)
        identities = load_voters_csv(voters_path)
    except (OSError, KeyError) as exc:
        _log(f"CSV load FAILED: {exc}")
        return {"success": False, "message": f"CSV error: {exc}"}

    added = []
    for name in names:
        result = admin_command(host, pin, "add_candidate", log_fn, name=name)
        if not result["success"]:
            return result
        added.append(result["result"])

    result = admin_command(host, pin, "authorize_multiple_voters", log_fn, identities=identities)
    if not result["success"]:
        return result
    batch = result["result"]
    _log(f"Imported {len(added)} candidates, authorized {len(batch['authorized'])} voters, "
         f"skipped {len(batch['skipped'])}.")
    return {
        "success": True,
        "message": f"Imported {len(added)} candidates and {len(batch['authorized'])} voters.",
        "candidates": added,
        "authorized": batch["authorized"],
        "skipped": batch["skipped"],
    }


# ── Results & audit ──────────────────────────────────────────────────

def results_table(host) -> list:
    """Candidates ordered by votes (desc), ties in registration order."""
    rows = host.query("get_all_candidates")["result"]
    return sorted(rows, key=lambda c: (-c["vote_count"], c["id"]))


def export_audit_log(host, path: str = None, log_fn=None) -> dict:
    def _log(msg):
        if log_fn: log_fn(msg)

    path = path or AUDIT_LOG_PATH
    ok, bad_seq = host.verify_audit_log()
    if not ok:
        return {"success": False, "message": f"Audit chain broken at event #{bad_seq}."}
    try:
        host.election.sink.export_json(path)
    except OSError as exc:
        _log(f"Export FAILED: {exc}")
        _log(traceback.format_exc())
        return {"success": False, "message": str(exc)}
    _log(f"Audit log exported to {path}")
    return {"success": True, "message": f"Audit log exported to {path}", "path": path}
