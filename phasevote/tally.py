"""
tally.py  —  Winner selection at finalization.

Candidates are scanned in registration order (ascending id). A candidate
takes the lead only with a strictly greater vote count, so among tied
candidates the earliest registered wins. The running maximum starts at 0,
so an election with no votes has no winner (id 0).
"""


def select_winner(candidates):
    """Return the leading Candidate, or None when no candidate has a vote."""
    leader = None
    best = 0
    for cand in candidates:
        if cand.vote_count > best:
            best = cand.vote_count
            leader = cand
    return leader


def run_tally(state, sink) -> int:
    ordered = (state.candidates[cid] for cid in state.candidate_order)
    leader = select_winner(ordered)
    if leader is None:
        state.winner_id = 0
        return 0
    state.winner_id = leader.id
    sink.emit("WinnerDeclared", id=leader.id, name=leader.name, vote_count=leader.vote_count)
    return leader.id
