"""
queries.py  —  Read-only views over the election state.

Nothing here mutates state; records are returned as copies.
"""

from collections import namedtuple

from phasevote import candidates, voters
from phasevote.access import require_phase
from phasevote.errors import NoWinnerError
from phasevote.models import Phase

Winner = namedtuple("Winner", ["id", "name", "vote_count"])


def get_candidate(state, candidate_id):
    return candidates.get_candidate(state, candidate_id)


def get_all_candidates(state) -> list:
    return candidates.all_candidates(state)


def get_candidate_ids(state) -> list:
    return candidates.candidate_ids(state)


def get_voter_info(state, identity):
    return voters.voter_info(state, identity)


def get_authorized_voters(state) -> list:
    return voters.authorized_identities(state)


def is_authorized(state, identity) -> bool:
    return voters.is_authorized(state, identity)


def has_voted(state, identity) -> bool:
    return voters.has_voted(state, identity)


def get_winner(state) -> Winner:
    require_phase(state, Phase.FINALIZED)
    if state.winner_id == 0:
        raise NoWinnerError("The election finished without a winner.")
    cand = candidates.lookup(state, state.winner_id)
    return Winner(cand.id, cand.name, cand.vote_count)


def get_election_stats(state) -> dict:
    return {
        "phase": state.phase.value,
        "candidate_count": state.candidate_count,
        "voter_count": state.voter_count,
        "total_votes": state.total_votes,
    }
