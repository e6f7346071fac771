"""
election.py  —  Phase-gated election state machine.

    Preparation ──start_voting──▶ Voting ──finalize_election──▶ Finalized

Every command runs its guards first (admin check, then phase, then input
checks) and only mutates state once all of them pass, so a failed command
leaves state and the notification log untouched.

The caller identity is passed explicitly to each command; authenticating
it is the host's job (see host.py).
"""

from phasevote import candidates, queries, tally, voters
from phasevote.access import is_valid_identity, require_admin, require_phase
from phasevote.errors import (
    AlreadyVotedError,
    InvalidIdentityError,
    PreconditionFailedError,
    UnauthorizedError,
)
from phasevote.events import EventLog
from phasevote.models import ElectionState, Phase


class Election:
    def __init__(self, election_id: str, admin_identity: str, sink=None):
        if not is_valid_identity(admin_identity):
            raise InvalidIdentityError(f"Invalid admin identity: {admin_identity!r}")
        self.state = ElectionState(election_id=election_id, admin_identity=admin_identity)
        self.sink = sink if sink is not None else EventLog()

    @classmethod
    def from_state(cls, state: ElectionState, sink=None) -> "Election":
        election = cls.__new__(cls)
        election.state = state
        election.sink = sink if sink is not None else EventLog()
        return election

    @property
    def phase(self) -> Phase:
        return self.state.phase

    # ── Registration (Preparation) ──────────────────────────────────

    def add_candidate(self, caller, name):
        require_admin(self.state, caller)
        require_phase(self.state, Phase.PREPARATION)
        return candidates.add_candidate(self.state, name, self.sink)

    def authorize_voter(self, caller, identity):
        require_admin(self.state, caller)
        require_phase(self.state, Phase.PREPARATION)
        return voters.authorize_voter(self.state, identity, self.sink)

    def authorize_multiple_voters(self, caller, identities):
        require_admin(self.state, caller)
        require_phase(self.state, Phase.PREPARATION)
        if not isinstance(identities, (list, tuple)):
            raise InvalidIdentityError(f"Expected a list of voter identities, got {type(identities).__name__}.")
        return voters.authorize_many(self.state, list(identities), self.sink)

    # ── Phase transitions ───────────────────────────────────────────

    def start_voting(self, caller) -> None:
        require_admin(self.state, caller)
        require_phase(self.state, Phase.PREPARATION)
        if self.state.candidate_count < 1:
            raise PreconditionFailedError("At least one candidate is required to start voting.")
        if self.state.voter_count < 1:
            raise PreconditionFailedError("At least one authorized voter is required to start voting.")
        self.state.phase = Phase.VOTING
        self.sink.emit("PhaseChanged", new_phase=Phase.VOTING.value)

    def finalize_election(self, caller) -> int:
        require_admin(self.state, caller)
        require_phase(self.state, Phase.VOTING)
        self.state.phase = Phase.FINALIZED
        self.sink.emit("PhaseChanged", new_phase=Phase.FINALIZED.value)
        return tally.run_tally(self.state, self.sink)

    # ── Voting ──────────────────────────────────────────────────────

    def vote(self, caller, candidate_id) -> None:
        require_phase(self.state, Phase.VOTING)
        voter = self.state.voters.get(caller) if isinstance(caller, str) else None
        if voter is None or not voter.is_authorized:
            raise UnauthorizedError("Caller is not an authorized voter.")
        if voter.has_voted:
            raise AlreadyVotedError(f"Voter {caller} has already voted.")
        cand = candidates.lookup(self.state, candidate_id)

        voter.has_voted = True
        voter.voted_for = cand.id
        cand.vote_count += 1
        self.state.total_votes += 1
        self.sink.emit("VoteCast", identity=caller, candidate_id=cand.id)

    # ── Queries ─────────────────────────────────────────────────────

    def get_candidate(self, candidate_id):
        return queries.get_candidate(self.state, candidate_id)

    def get_all_candidates(self):
        return queries.get_all_candidates(self.state)

    def get_candidate_ids(self):
        return queries.get_candidate_ids(self.state)

    def get_voter_info(self, identity):
        return queries.get_voter_info(self.state, identity)

    def get_authorized_voters(self):
        return queries.get_authorized_voters(self.state)

    def is_authorized(self, identity) -> bool:
        return queries.is_authorized(self.state, identity)

    def has_voted(self, identity) -> bool:
        return queries.has_voted(self.state, identity)

    def get_winner(self):
        return queries.get_winner(self.state)

    def get_election_stats(self) -> dict:
        return queries.get_election_stats(self.state)


def invariant_violations(state) -> list:
    """Check the bookkeeping invariants; returns human-readable problems."""
    problems = []
    if state.candidate_order != list(range(1, len(state.candidates) + 1)):
        problems.append("candidate ids are not the dense sequence 1..N")
    count_sum = sum(c.vote_count for c in state.candidates.values())
    if count_sum != state.total_votes:
        problems.append(f"total_votes={state.total_votes} but candidate counts sum to {count_sum}")
    voted = [v for v in state.voters.values() if v.has_voted]
    if len(voted) != state.total_votes:
        problems.append(f"total_votes={state.total_votes} but {len(voted)} voters have voted")
    for v in state.voters.values():
        if v.has_voted != (v.voted_for in state.candidates):
            problems.append(f"voter {v.identity} has inconsistent vote record")
    if state.phase is not Phase.FINALIZED and state.winner_id != 0:
        problems.append("winner set before finalization")
    return problems
