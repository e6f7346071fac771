"""
candidates.py  —  Candidate registry.

Ids are dense and 1-based: the n-th registered candidate gets id n and
`candidate_order[n - 1] == n`. Records are never removed, so ids are never
reused. Phase and admin gating is done by the caller (election.py).
"""

import dataclasses

from phasevote.errors import EmptyInputError, NotFoundError
from phasevote.models import Candidate


def validate_name(name) -> str:
    if name is None or not isinstance(name, str) or not name.strip():
        raise EmptyInputError("Candidate name must not be blank.")
    return name


def add_candidate(state, name: str, sink) -> Candidate:
    validate_name(name)
    cid = state.candidate_count + 1
    cand = Candidate(id=cid, name=name, vote_count=0)
    state.candidates[cid] = cand
    state.candidate_order.append(cid)
    sink.emit("CandidateAdded", id=cid, name=name)
    return cand


def exists(state, candidate_id) -> bool:
    if isinstance(candidate_id, bool) or not isinstance(candidate_id, int):
        return False
    return candidate_id in state.candidates


def lookup(state, candidate_id) -> Candidate:
    """Return the live record. Fails NotFound for unknown ids."""
    if not exists(state, candidate_id):
        raise NotFoundError(f"No candidate with id {candidate_id!r}.")
    return state.candidates[candidate_id]


def get_candidate(state, candidate_id) -> Candidate:
    return dataclasses.replace(lookup(state, candidate_id))


def all_candidates(state) -> list:
    return [dataclasses.replace(state.candidates[cid]) for cid in state.candidate_order]


def candidate_ids(state) -> list:
    return list(state.candidate_order)
