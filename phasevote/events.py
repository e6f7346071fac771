"""
events.py  —  Append-only, hash-chained notification log.

Each event commits to the one before it:

    hash = SHA256(canonical_json({seq, name, payload, prev_hash}))

with the first event chaining from GENESIS_HASH. Anyone holding an export
of the log can recompute the chain and detect edits, reordering or
deletions (see verify_chain()).
"""

import json
import os
from dataclasses import dataclass, asdict

from phasevote.crypto_utils import hash_payload

GENESIS_HASH = "0" * 64

EVENT_NAMES = (
    "CandidateAdded",
    "VoterAuthorized",
    "PhaseChanged",
    "VoteCast",
    "WinnerDeclared",
)


@dataclass(frozen=True)
class Event:
    seq: int
    name: str
    payload: dict
    prev_hash: str
    hash: str

    def to_dict(self) -> dict:
        return asdict(self)


def compute_event_hash(seq: int, name: str, payload: dict, prev_hash: str) -> str:
    return hash_payload({
        "seq": seq,
        "name": name,
        "payload": payload,
        "prev_hash": prev_hash,
    })


class EventLog:
    def __init__(self):
        self._events = []

    def __len__(self):
        return len(self._events)

    @property
    def head_hash(self) -> str:
        return self._events[-1].hash if self._events else GENESIS_HASH

    def emit(self, name: str, /, **payload) -> Event:
        if name not in EVENT_NAMES:
            raise ValueError(f"Unknown notification: {name}")
        seq = len(self._events) + 1
        prev = self.head_hash
        event = Event(seq, name, dict(payload), prev, compute_event_hash(seq, name, payload, prev))
        self._events.append(event)
        return event

    def events(self) -> list:
        return list(self._events)

    def since(self, seq: int) -> list:
        """Events with sequence number greater than *seq*."""
        return self._events[max(seq, 0):]

    def named(self, name: str) -> list:
        return [e for e in self._events if e.name == name]

    # Used by the host to drop the notifications of a command whose commit failed.
    def mark(self) -> int:
        return len(self._events)

    def rollback(self, mark: int) -> None:
        del self._events[mark:]

    def verify_chain(self) -> tuple:
        """Returns (True, None) or (False, seq of the first bad event)."""
        return verify_events(self._events)

    def to_list(self) -> list:
        return [e.to_dict() for e in self._events]

    @classmethod
    def from_list(cls, rows) -> "EventLog":
        log = cls()
        for row in rows:
            log._events.append(Event(
                seq=int(row["seq"]),
                name=row["name"],
                payload=dict(row["payload"]),
                prev_hash=row["prev_hash"],
                hash=row["hash"],
            ))
        return log

    def export_json(self, path: str) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(self.to_list(), fh, indent=2)


def verify_events(events) -> tuple:
    prev = GENESIS_HASH
    for expected_seq, event in enumerate(events, start=1):
        if event.seq != expected_seq or event.prev_hash != prev:
            return False, event.seq
        if compute_event_hash(event.seq, event.name, event.payload, event.prev_hash) != event.hash:
            return False, event.seq
        prev = event.hash
    return True, None
