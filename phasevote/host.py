"""
host.py  —  Execution host for one election.

The election core assumes three things from its environment, all provided
here:

  1. Authenticated caller identity — commands arrive signed (RSA-PSS) with
     the signer's public key; the caller is the identity derived from it.
  2. Serialized, all-or-nothing execution — one lock around every command;
     state and the event log are restored if the commit to storage fails.
  3. Durable storage — an optional `persist(state, events, nonces=...)`
     callable, normally db.save_state. Spent nonces are stored with the
     state and handed back through `seen_nonces` when the host is rebuilt.

Results are plain dicts:
    {"success": True,  "message": ..., "result": ...}
    {"success": False, "error": <kind>, "message": ...}
"""

import copy
import threading
import traceback

from phasevote import crypto_utils
from phasevote.errors import AuthenticationError, ElectionError, WrongPhaseError
from phasevote.models import Candidate, Voter
from phasevote.queries import Winner
from phasevote.voters import BatchResult

COMMANDS = {
    "add_candidate":             ("name",),
    "authorize_voter":           ("identity",),
    "authorize_multiple_voters": ("identities",),
    "start_voting":              (),
    "finalize_election":         (),
    "vote":                      ("candidate_id",),
}

QUERIES = {
    "get_candidate":         ("candidate_id",),
    "get_all_candidates":    (),
    "get_candidate_ids":     (),
    "get_voter_info":        ("identity",),
    "get_authorized_voters": (),
    "is_authorized":         ("identity",),
    "has_voted":             ("identity",),
    "get_winner":            (),
    "get_election_stats":    (),
}

MAX_NONCE_LEN = 128  # command_nonces.nonce column width

# Expected argument types for signed commands; bool is an int subclass
# and is refused by the registries themselves.
ARG_TYPES = {
    "name":         str,
    "identity":     str,
    "identities":   (list, tuple),
    "candidate_id": int,
}


def to_jsonable(value):
    if isinstance(value, (Candidate, Voter)):
        return value.to_dict()
    if isinstance(value, Winner):
        return dict(value._asdict())
    if isinstance(value, BatchResult):
        return {"authorized": list(value.authorized), "skipped": list(value.skipped)}
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    return value


def failure(exc: ElectionError) -> dict:
    result = {"success": False, "error": exc.kind, "message": exc.message}
    if isinstance(exc, WrongPhaseError):
        result["required_phase"] = exc.required.value
    return result


class ElectionHost:
    def __init__(self, election, persist=None, seen_nonces=None):
        self.election = election
        self.persist = persist
        self._lock = threading.Lock()
        self._seen_nonces = set(seen_nonces or ())

    @property
    def election_id(self) -> str:
        return self.election.state.election_id

    # ── Authentication ──────────────────────────────────────────────

    def authenticate(self, payload: dict, signature: bytes, public_key_pem) -> tuple:
        """
        Check a signed command and return (caller_identity, action, args, nonce).

        Raises:
            AuthenticationError: on any problem with the envelope.
        """
        try:
            public_key = crypto_utils.deserialize_public_key(public_key_pem)
        except (ValueError, TypeError) as exc:
            raise AuthenticationError(f"Unreadable public key: {exc}") from exc

        if not isinstance(payload, dict) or not isinstance(signature, bytes):
            raise AuthenticationError("Malformed command envelope.")
        if not crypto_utils.verify_signature(public_key, payload, signature):
            raise AuthenticationError("Signature verification failed.")
        if payload.get("election_id") != self.election_id:
            raise AuthenticationError(
                f"Command is for election '{payload.get('election_id')}', not '{self.election_id}'.")

        action = payload.get("action")
        args = payload.get("args", {})
        nonce = payload.get("nonce")
        if not isinstance(action, str) or not isinstance(args, dict) or not isinstance(nonce, str):
            raise AuthenticationError("Malformed command payload.")
        if action not in COMMANDS:
            raise AuthenticationError(f"Unknown command: {action!r}")
        if set(args) != set(COMMANDS[action]):
            raise AuthenticationError(
                f"Command '{action}' expects arguments {list(COMMANDS[action])}, got {sorted(args)}.")
        for name, types in ARG_TYPES.items():
            if name in args and not isinstance(args[name], types):
                raise AuthenticationError(f"Argument '{name}' has the wrong type.")

        if not nonce or len(nonce) > MAX_NONCE_LEN or nonce in self._seen_nonces:
            raise AuthenticationError("Replayed, missing or oversized nonce.")
        self._seen_nonces.add(nonce)

        return crypto_utils.identity_from_public_key(public_key), action, args, nonce

    def submit(self, payload: dict, signature: bytes, public_key_pem, log_fn=None) -> dict:
        def _log(msg):
            if log_fn: log_fn(msg)

        with self._lock:
            try:
                caller, action, args, nonce = self.authenticate(payload, signature, public_key_pem)
            except AuthenticationError as exc:
                _log(f"Command REJECTED: {exc.message}")
                return failure(exc)
            _log(f"Caller authenticated: {caller}")
            return self._run(caller, action, args, _log, nonce=nonce)

    # ── Execution ───────────────────────────────────────────────────

    def execute(self, caller: str, action: str, log_fn=None, **args) -> dict:
        """Run a command for an already-authenticated *caller*."""
        def _log(msg):
            if log_fn: log_fn(msg)

        if action not in COMMANDS:
            return {"success": False, "error": "UnknownCommand", "message": f"Unknown command: {action!r}"}
        with self._lock:
            return self._run(caller, action, args, _log)

    def _commit(self, nonce) -> None:
        if self.persist is not None:
            self.persist(self.election.state, self.election.sink.events(),
                         nonces=[nonce] if nonce else [])

    def _run(self, caller, action, args, _log, nonce=None) -> dict:
        state_before = copy.deepcopy(self.election.state)
        mark = self.election.sink.mark()

        def _restore():
            self.election.state = state_before
            self.election.sink.rollback(mark)

        try:
            value = getattr(self.election, action)(caller, **args)
        except ElectionError as exc:
            _log(f"{action} FAILED [{exc.kind}]: {exc.message}")
            if nonce is not None:
                # a rejected command still spends its nonce
                try:
                    self._commit(nonce)
                except RuntimeError as store_exc:
                    _log(f"Could not record nonce: {store_exc}")
            return failure(exc)
        except Exception as exc:
            _restore()
            _log(f"{action} FAILED unexpectedly: {exc}")
            _log(traceback.format_exc())
            return {"success": False, "error": "InternalError", "message": str(exc)}

        try:
            self._commit(nonce)
        except RuntimeError as exc:
            _restore()
            _log(f"{action} rolled back, storage commit failed: {exc}")
            return {"success": False, "error": "StorageError", "message": str(exc)}

        _log(f"{action} committed. Audit head: {self.election.sink.head_hash[:16]}...")
        return {"success": True, "message": f"{action} succeeded.", "result": to_jsonable(value)}

    # ── Reads ───────────────────────────────────────────────────────

    def query(self, name: str, **kwargs) -> dict:
        if name not in QUERIES:
            return {"success": False, "error": "UnknownQuery", "message": f"Unknown query: {name!r}"}
        if set(kwargs) != set(QUERIES[name]):
            return {"success": False, "error": "BadArguments",
                    "message": f"Query '{name}' expects arguments {list(QUERIES[name])}."}
        with self._lock:
            try:
                value = getattr(self.election, name)(**kwargs)
            except ElectionError as exc:
                return failure(exc)
        return {"success": True, "message": "", "result": to_jsonable(value)}

    def audit_log(self, since: int = 0) -> list:
        with self._lock:
            return [e.to_dict() for e in self.election.sink.since(since)]

    def verify_audit_log(self) -> tuple:
        with self._lock:
            return self.election.sink.verify_chain()
