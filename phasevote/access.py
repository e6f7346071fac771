"""
access.py  —  Caller checks for the election core.

The admin is a single identity fixed when the election is created.
Identities are address-like strings ("0x" + 40 hex chars, see
crypto_utils.identity_from_public_key); the all-zero address is reserved.
"""

from phasevote.errors import UnauthorizedError, WrongPhaseError

ZERO_IDENTITY = "0x" + "0" * 40


def is_valid_identity(identity) -> bool:
    # compared exactly elsewhere, so padded forms are refused here
    if not isinstance(identity, str) or identity != identity.strip():
        return False
    return bool(identity) and identity.lower() != ZERO_IDENTITY


def is_admin(state, caller) -> bool:
    return caller is not None and caller == state.admin_identity


def require_admin(state, caller) -> None:
    if not is_admin(state, caller):
        raise UnauthorizedError("Caller is not the election admin.")


def require_phase(state, required) -> None:
    if state.phase is not required:
        raise WrongPhaseError(required)
