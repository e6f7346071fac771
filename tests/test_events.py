"""
tests/test_events.py
====================
Tests for the hash-chained notification log.
"""

import json, os, sys, tempfile, unittest
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from phasevote.events import GENESIS_HASH, Event, EventLog, verify_events


class TestEventLog(unittest.TestCase):

    def setUp(self):
        self.log = EventLog()
        self.log.emit("CandidateAdded", id=1, name="A")
        self.log.emit("VoterAuthorized", identity="0xabc")
        self.log.emit("PhaseChanged", new_phase="Voting")

    def test_sequence_and_chaining(self):
        events = self.log.events()
        self.assertEqual([e.seq for e in events], [1, 2, 3])
        self.assertEqual(events[0].prev_hash, GENESIS_HASH)
        self.assertEqual(events[1].prev_hash, events[0].hash)
        self.assertEqual(self.log.head_hash, events[2].hash)
        self.assertEqual(len(events[0].hash), 64)

    def test_unknown_notification_rejected(self):
        with self.assertRaises(ValueError):
            self.log.emit("SomethingElse")
        self.assertEqual(len(self.log), 3)

    def test_verify_clean_chain(self):
        self.assertEqual(self.log.verify_chain(), (True, None))

    def test_tampered_payload_detected(self):
        events = self.log.events()
        forged = Event(2, "VoterAuthorized", {"identity": "0xdef"}, events[1].prev_hash, events[1].hash)
        events[1] = forged
        self.assertEqual(verify_events(events), (False, 2))

    def test_deleted_event_detected(self):
        events = self.log.events()
        del events[1]
        ok, bad = verify_events(events)
        self.assertFalse(ok)
        self.assertEqual(bad, 3)

    def test_since_and_named(self):
        self.assertEqual([e.seq for e in self.log.since(1)], [2, 3])
        self.assertEqual(self.log.since(3), [])
        self.assertEqual(len(self.log.named("PhaseChanged")), 1)

    def test_rollback_to_mark(self):
        mark = self.log.mark()
        self.log.emit("VoteCast", identity="0xabc", candidate_id=1)
        self.log.rollback(mark)
        self.assertEqual(len(self.log), 3)
        nxt = self.log.emit("VoteCast", identity="0xabc", candidate_id=1)
        self.assertEqual(nxt.seq, 4)
        self.assertEqual(self.log.verify_chain(), (True, None))

    def test_list_round_trip_keeps_chain(self):
        rows = json.loads(json.dumps(self.log.to_list()))
        restored = EventLog.from_list(rows)
        self.assertEqual(restored.events(), self.log.events())
        self.assertEqual(restored.verify_chain(), (True, None))

    def test_export_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "audit", "log.json")
            self.log.export_json(path)
            with open(path, encoding="utf-8") as fh:
                rows = json.load(fh)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0]["name"], "CandidateAdded")


if __name__ == "__main__":
    unittest.main(verbosity=2)
