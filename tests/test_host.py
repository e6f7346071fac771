"""
tests/test_host.py
==================
Tests for the execution host: signed command authentication, result
shapes, replay protection and rollback when storage fails.
"""

import os, sys, unittest
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from phasevote.crypto_utils import (
    generate_rsa_keypair, identity_from_public_key, serialize_public_key,
    build_command_payload, sign_payload, sign_command,
)
from phasevote.models import ElectionState
from phasevote.election import Election
from phasevote.host import ElectionHost

EID = "HOST_TEST"


class TestElectionHost(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.admin_key, _ = generate_rsa_keypair(2048)
        cls.v1_key, _ = generate_rsa_keypair(2048)
        cls.v2_key, _ = generate_rsa_keypair(2048)
        cls.admin = identity_from_public_key(cls.admin_key.public_key())
        cls.v1 = identity_from_public_key(cls.v1_key.public_key())
        cls.v2 = identity_from_public_key(cls.v2_key.public_key())

    def setUp(self):
        self.saved = []
        self.stored_nonces = []
        self.host = ElectionHost(Election(EID, self.admin), persist=self._persist)
        self.fail_persist = False

    def _persist(self, state, events, nonces=()):
        if self.fail_persist:
            raise RuntimeError("disk full")
        self.saved.append((state.to_dict(), len(events)))
        self.stored_nonces.extend(nonces)

    def send(self, key, action, **args):
        payload, sig, pub = sign_command(key, EID, action, **args)
        return self.host.submit(payload, sig, pub)

    def prepare(self):
        self.send(self.admin_key, "add_candidate", name="A")
        self.send(self.admin_key, "add_candidate", name="B")
        self.send(self.admin_key, "authorize_multiple_voters", identities=[self.v1, self.v2])
        self.send(self.admin_key, "start_voting")

    # ── authentication ──────────────────────────────────────────────

    def test_admin_command_succeeds(self):
        result = self.send(self.admin_key, "add_candidate", name="A")
        self.assertTrue(result["success"])
        self.assertEqual(result["result"], {"id": 1, "name": "A", "vote_count": 0})
        self.assertEqual(len(self.saved), 1)

    def test_voter_key_cannot_run_admin_command(self):
        result = self.send(self.v1_key, "add_candidate", name="A")
        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "Unauthorized")
        self.assertEqual(self.host.query("get_candidate_ids")["result"], [])
        self.assertEqual(self.saved[-1][0]["candidates"], [])

    def test_bad_signature_rejected(self):
        payload = build_command_payload(EID, "add_candidate", {"name": "A"})
        sig = sign_payload(self.v1_key, payload)
        # signed by v1 but presented with the admin's public key
        result = self.host.submit(payload, sig, serialize_public_key(self.admin_key.public_key()))
        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "AuthenticationFailed")
        self.assertEqual(self.host.query("get_candidate_ids")["result"], [])

    def test_replay_rejected(self):
        payload, sig, pub = sign_command(self.admin_key, EID, "add_candidate", name="A")
        self.assertTrue(self.host.submit(payload, sig, pub)["success"])
        again = self.host.submit(payload, sig, pub)
        self.assertFalse(again["success"])
        self.assertEqual(again["error"], "AuthenticationFailed")
        self.assertEqual(self.host.query("get_candidate_ids")["result"], [1])

    def test_foreign_election_rejected(self):
        payload, sig, pub = sign_command(self.admin_key, "OTHER", "add_candidate", name="A")
        result = self.host.submit(payload, sig, pub)
        self.assertEqual(result["error"], "AuthenticationFailed")

    def test_unknown_action_and_bad_args_rejected(self):
        self.assertEqual(self.send(self.admin_key, "reset")["error"], "AuthenticationFailed")
        self.assertEqual(self.send(self.admin_key, "add_candidate", title="A")["error"], "AuthenticationFailed")

    def test_garbage_public_key_rejected(self):
        payload, sig, _ = sign_command(self.admin_key, EID, "start_voting")
        result = self.host.submit(payload, sig, b"not a key")
        self.assertEqual(result["error"], "AuthenticationFailed")

    def submit_raw(self, key, action, args, nonce="n-1"):
        payload = build_command_payload(EID, action, {})
        payload["args"] = args
        payload["nonce"] = nonce
        return self.host.submit(payload, sign_payload(key, payload), serialize_public_key(key.public_key()))

    def test_malformed_payload_fields_rejected(self):
        cases = [
            ("start_voting", {}, ["a"]),
            ("start_voting", {}, 7),
            ("start_voting", ["name"], "n-2"),
            (["start_voting"], {}, "n-3"),
            ("start_voting", {}, "x" * 500),
        ]
        for action, args, nonce in cases:
            result = self.submit_raw(self.admin_key, action, args, nonce=nonce)
            self.assertFalse(result["success"])
            self.assertEqual(result["error"], "AuthenticationFailed")

    def test_signature_must_be_bytes(self):
        payload, _, pub = sign_command(self.admin_key, EID, "start_voting")
        for sig in ("notbytes", None, 12):
            self.assertEqual(self.host.submit(payload, sig, pub)["error"], "AuthenticationFailed")

    def test_argument_types_checked(self):
        result = self.send(self.admin_key, "authorize_multiple_voters", identities="0x" + "ab" * 20)
        self.assertEqual(result["error"], "AuthenticationFailed")
        self.assertEqual(self.send(self.admin_key, "add_candidate", name=5)["error"], "AuthenticationFailed")
        self.assertEqual(self.host.query("get_authorized_voters")["result"], [])

    def test_replay_rejected_after_restart(self):
        payload, sig, pub = sign_command(self.admin_key, EID, "add_candidate", name="A")
        self.assertTrue(self.host.submit(payload, sig, pub)["success"])
        rejected = sign_command(self.v1_key, EID, "add_candidate", name="B")
        self.assertEqual(self.host.submit(*rejected)["error"], "Unauthorized")
        self.assertEqual(self.stored_nonces, [payload["nonce"], rejected[0]["nonce"]])

        # rebuild from what storage holds, as open_election does
        state = ElectionState.from_dict(self.saved[-1][0])
        restarted = ElectionHost(Election.from_state(state), seen_nonces=self.stored_nonces)
        for envelope in ((payload, sig, pub), rejected):
            again = restarted.submit(*envelope)
            self.assertEqual(again["error"], "AuthenticationFailed")
        self.assertEqual(restarted.query("get_candidate_ids")["result"], [1])

    # ── execution ───────────────────────────────────────────────────

    def test_wrong_phase_reports_required_phase(self):
        result = self.send(self.admin_key, "finalize_election")
        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "WrongPhase")
        self.assertEqual(result["required_phase"], "Voting")

    def test_batch_reports_skipped_entries(self):
        zero = "0x" + "0" * 40
        result = self.send(self.admin_key, "authorize_multiple_voters",
                           identities=[self.v1, zero, self.v1, self.v2])
        self.assertTrue(result["success"])
        self.assertEqual(result["result"], {"authorized": [self.v1, self.v2], "skipped": [zero, self.v1]})

    def test_full_election_through_host(self):
        self.prepare()
        self.assertTrue(self.send(self.v1_key, "vote", candidate_id=2)["success"])
        self.assertTrue(self.send(self.v2_key, "vote", candidate_id=2)["success"])
        dup = self.send(self.v1_key, "vote", candidate_id=1)
        self.assertEqual(dup["error"], "AlreadyVoted")
        self.assertTrue(self.send(self.admin_key, "finalize_election")["success"])

        winner = self.host.query("get_winner")
        self.assertEqual(winner["result"], {"id": 2, "name": "B", "vote_count": 2})
        info = self.host.query("get_voter_info", identity=self.v1)["result"]
        self.assertEqual(info["voted_for"], 2)
        self.assertEqual(self.host.verify_audit_log(), (True, None))
        self.assertEqual(self.host.audit_log()[-1]["name"], "WinnerDeclared")

    def test_storage_failure_rolls_back(self):
        self.prepare()
        events_before = len(self.host.audit_log())
        self.fail_persist = True
        result = self.send(self.v1_key, "vote", candidate_id=1)
        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "StorageError")
        self.assertFalse(self.host.query("has_voted", identity=self.v1)["result"])
        self.assertEqual(self.host.query("get_election_stats")["result"]["total_votes"], 0)
        self.assertEqual(len(self.host.audit_log()), events_before)

        self.fail_persist = False
        self.assertTrue(self.send(self.v1_key, "vote", candidate_id=1)["success"])
        self.assertEqual(self.host.verify_audit_log(), (True, None))

    def test_execute_for_authenticated_caller(self):
        result = self.host.execute(self.admin, "add_candidate", name="A")
        self.assertTrue(result["success"])
        self.assertEqual(self.host.execute(self.admin, "nope")["error"], "UnknownCommand")

    # ── queries ─────────────────────────────────────────────────────

    def test_query_errors(self):
        self.assertEqual(self.host.query("get_candidate", candidate_id=5)["error"], "NotFound")
        self.assertEqual(self.host.query("get_winner")["required_phase"], "Finalized")
        self.assertEqual(self.host.query("drop_tables")["error"], "UnknownQuery")
        self.assertEqual(self.host.query("get_candidate")["error"], "BadArguments")

    def test_stats_query(self):
        self.prepare()
        self.assertEqual(self.host.query("get_election_stats")["result"], {
            "phase": "Voting", "candidate_count": 2, "voter_count": 2, "total_votes": 0,
        })
        self.assertTrue(self.host.query("is_authorized", identity=self.v2)["result"])
        self.assertFalse(self.host.query("is_authorized", identity=self.admin)["result"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
