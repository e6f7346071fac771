"""
voters.py  —  Voter registry.

Single authorization aborts on a bad entry; batch authorization skips bad
or duplicate entries and carries on. Both emit one VoterAuthorized
notification per identity actually added.
"""

import dataclasses
from collections import namedtuple

from phasevote.access import is_valid_identity
from phasevote.errors import AlreadyAuthorizedError, InvalidIdentityError
from phasevote.models import Voter

BatchResult = namedtuple("BatchResult", ["authorized", "skipped"])


def _check_new_identity(state, identity) -> None:
    if not is_valid_identity(identity):
        raise InvalidIdentityError(f"Invalid voter identity: {identity!r}")
    if identity in state.voters:
        raise AlreadyAuthorizedError(f"Voter {identity} is already authorized.")


def _insert(state, identity, sink) -> Voter:
    voter = Voter(identity=identity, is_authorized=True, has_voted=False, voted_for=0)
    state.voters[identity] = voter
    state.authorized_voters.append(identity)
    sink.emit("VoterAuthorized", identity=identity)
    return voter


def authorize_voter(state, identity, sink) -> Voter:
    _check_new_identity(state, identity)
    return _insert(state, identity, sink)


def authorize_many(state, identities, sink) -> BatchResult:
    authorized, skipped = [], []
    for identity in identities:
        try:
            _check_new_identity(state, identity)
        except (InvalidIdentityError, AlreadyAuthorizedError):
            skipped.append(identity)
            continue
        _insert(state, identity, sink)
        authorized.append(identity)
    return BatchResult(authorized, skipped)


def voter_info(state, identity) -> Voter:
    """Copy of the voter record; unknown identities get an unauthorized default."""
    voter = state.voters.get(identity) if isinstance(identity, str) else None
    if voter is None:
        return Voter(identity=identity)
    return dataclasses.replace(voter)


def is_authorized(state, identity) -> bool:
    return voter_info(state, identity).is_authorized


def has_voted(state, identity) -> bool:
    return voter_info(state, identity).has_voted


def authorized_identities(state) -> list:
    return list(state.authorized_voters)
