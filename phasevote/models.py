"""
models.py  —  Election records and their persisted layout.

  ElectionState  : the singleton election record plus both registries
  Candidate      : a registered option, id 1..N in registration order
  Voter          : an authorized identity and its vote status

`to_dict()` / `from_dict()` give the JSON-safe form stored by db.py and
exported with the audit log.
"""

import enum
from dataclasses import dataclass, field, asdict
from typing import Dict, List


class Phase(enum.Enum):
    PREPARATION = "Preparation"
    VOTING = "Voting"
    FINALIZED = "Finalized"


@dataclass
class Candidate:
    id: int
    name: str
    vote_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Voter:
    identity: str
    is_authorized: bool = False
    has_voted: bool = False
    voted_for: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ElectionState:
    election_id: str
    admin_identity: str
    phase: Phase = Phase.PREPARATION
    total_votes: int = 0
    winner_id: int = 0
    candidates: Dict[int, Candidate] = field(default_factory=dict)
    candidate_order: List[int] = field(default_factory=list)
    voters: Dict[str, Voter] = field(default_factory=dict)
    authorized_voters: List[str] = field(default_factory=list)

    @property
    def candidate_count(self) -> int:
        return len(self.candidate_order)

    @property
    def voter_count(self) -> int:
        return len(self.authorized_voters)

    def to_dict(self) -> dict:
        return {
            "election_id": self.election_id,
            "admin_identity": self.admin_identity,
            "phase": self.phase.value,
            "total_votes": self.total_votes,
            "winner_id": self.winner_id,
            "candidates": [self.candidates[cid].to_dict() for cid in self.candidate_order],
            "voters": [self.voters[ident].to_dict() for ident in self.authorized_voters],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ElectionState":
        state = cls(
            election_id=data["election_id"],
            admin_identity=data["admin_identity"],
            phase=Phase(data["phase"]),
            total_votes=int(data["total_votes"]),
            winner_id=int(data["winner_id"]),
        )
        # Lists are stored in registration order, so rebuilding them
        # restores both the keyed records and the order lists.
        for row in data.get("candidates", []):
            cand = Candidate(int(row["id"]), row["name"], int(row["vote_count"]))
            state.candidates[cand.id] = cand
            state.candidate_order.append(cand.id)
        for row in data.get("voters", []):
            voter = Voter(
                identity=row["identity"],
                is_authorized=bool(row["is_authorized"]),
                has_voted=bool(row["has_voted"]),
                voted_for=int(row["voted_for"]),
            )
            state.voters[voter.identity] = voter
            state.authorized_voters.append(voter.identity)
        return state
