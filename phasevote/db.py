"""
db.py  —  Database access layer for PhaseVote.
All MySQL interactions centralised here.

Persisted layout (see sql/schema.sql):
  elections         : one row per election (phase, totals, winner)
  candidates        : candidate id -> record; ids are registration order
  voters            : identity -> record, `position` = authorization order
  election_events   : the hash-chained notification log
  command_nonces    : nonces of signed commands already seen (replay guard)
"""

import json
import mysql.connector
from mysql.connector import Error as MySQLError

from phasevote.events import EventLog
from phasevote.models import ElectionState
from phasevote.paths import CONFIG_PATH


def _load_db_config() -> dict:
    with open(CONFIG_PATH, "r", encoding="utf-8") as fh:
        return json.load(fh)["db"]


def get_connection():
    cfg = _load_db_config()
    try:
        conn = mysql.connector.connect(
            host=cfg["host"],
            port=int(cfg["port"]),
            user=cfg["user"],
            password=cfg["password"],
            database=cfg["database"],
            autocommit=False,
            charset="utf8mb4",
            collation="utf8mb4_unicode_ci",
        )
        return conn
    except MySQLError as exc:
        raise RuntimeError(f"Database connection failed: {exc}") from exc


def test_connection() -> bool:
    try:
        conn = get_connection()
        conn.close()
        return True
    except RuntimeError:
        return False


# ── writes ──────────────────────────────────────────────────────────

_UPSERT_ELECTION = (
    "INSERT INTO elections (election_id, admin_identity, phase, total_votes, winner_id) "
    "VALUES (%s, %s, %s, %s, %s) "
    "ON DUPLICATE KEY UPDATE phase=VALUES(phase), total_votes=VALUES(total_votes), "
    "winner_id=VALUES(winner_id)"
)

_UPSERT_CANDIDATE = (
    "INSERT INTO candidates (election_id, candidate_id, name, vote_count) "
    "VALUES (%s, %s, %s, %s) "
    "ON DUPLICATE KEY UPDATE vote_count=VALUES(vote_count)"
)

_UPSERT_VOTER = (
    "INSERT INTO voters (election_id, identity, position, is_authorized, has_voted, voted_for) "
    "VALUES (%s, %s, %s, %s, %s, %s) "
    "ON DUPLICATE KEY UPDATE has_voted=VALUES(has_voted), voted_for=VALUES(voted_for)"
)

_INSERT_EVENT = (
    "INSERT INTO election_events (election_id, seq, name, payload, prev_hash, hash) "
    "VALUES (%s, %s, %s, %s, %s, %s)"
)

_INSERT_NONCE = (
    "INSERT IGNORE INTO command_nonces (election_id, nonce) VALUES (%s, %s)"
)


def save_state(state: ElectionState, events, nonces=()) -> None:
    """
    Write the full election state, any events not yet stored and the
    nonces of newly accepted commands, in a single transaction.
    """
    eid = state.election_id
    conn = get_connection()
    try:
        cur = conn.cursor()
        cur.execute(_UPSERT_ELECTION, (
            eid, state.admin_identity, state.phase.value, state.total_votes, state.winner_id))

        cand_rows = [(eid, c.id, c.name, c.vote_count)
                     for c in (state.candidates[cid] for cid in state.candidate_order)]
        if cand_rows:
            cur.executemany(_UPSERT_CANDIDATE, cand_rows)

        voter_rows = [(eid, v.identity, pos, int(v.is_authorized), int(v.has_voted), v.voted_for)
                      for pos, v in enumerate(state.voters[i] for i in state.authorized_voters)]
        if voter_rows:
            cur.executemany(_UPSERT_VOTER, voter_rows)

        cur.execute("SELECT COALESCE(MAX(seq), 0) FROM election_events WHERE election_id=%s", (eid,))
        stored = cur.fetchone()[0]
        event_rows = [(eid, e.seq, e.name, json.dumps(e.payload, sort_keys=True), e.prev_hash, e.hash)
                      for e in events if e.seq > stored]
        if event_rows:
            cur.executemany(_INSERT_EVENT, event_rows)

        nonce_rows = [(eid, n) for n in nonces]
        if nonce_rows:
            cur.executemany(_INSERT_NONCE, nonce_rows)

        conn.commit()
    except MySQLError as exc:
        conn.rollback()
        raise RuntimeError(f"Failed to save election state: {exc}") from exc
    finally:
        conn.close()


# ── reads ───────────────────────────────────────────────────────────

def load_state(election_id: str):
    """
    Returns (ElectionState, EventLog), or None if the election is not stored.
    """
    conn = get_connection()
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT election_id, admin_identity, phase, total_votes, winner_id "
                    "FROM elections WHERE election_id=%s LIMIT 1", (election_id,))
        row = cur.fetchone()
        if row is None:
            return None

        cur.execute("SELECT candidate_id AS id, name, vote_count FROM candidates "
                    "WHERE election_id=%s ORDER BY candidate_id ASC", (election_id,))
        row["candidates"] = cur.fetchall()

        cur.execute("SELECT identity, is_authorized, has_voted, voted_for FROM voters "
                    "WHERE election_id=%s ORDER BY position ASC", (election_id,))
        row["voters"] = cur.fetchall()

        cur.execute("SELECT seq, name, payload, prev_hash, hash FROM election_events "
                    "WHERE election_id=%s ORDER BY seq ASC", (election_id,))
        event_rows = cur.fetchall()
    except MySQLError as exc:
        raise RuntimeError(f"Failed to load election state: {exc}") from exc
    finally:
        conn.close()

    for ev in event_rows:
        if isinstance(ev["payload"], (str, bytes)):
            ev["payload"] = json.loads(ev["payload"])
    return ElectionState.from_dict(row), EventLog.from_list(event_rows)


def load_nonces(election_id: str) -> set:
    conn = get_connection()
    try:
        cur = conn.cursor()
        cur.execute("SELECT nonce FROM command_nonces WHERE election_id=%s", (election_id,))
        return {row[0] for row in cur.fetchall()}
    except MySQLError as exc:
        raise RuntimeError(f"Failed to load command nonces: {exc}") from exc
    finally:
        conn.close()
