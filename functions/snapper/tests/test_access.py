import unittest
from datetime import datetime, timedelta, timezone

from jose import jwt

from snapper.access import AccessGate, Identity, decode_identity
from snapper.db import InMemoryDbClient
from snapper.errors import Forbidden, NotFound

SECRET = "test-secret"


def make_token(claims, secret=SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


class DecodeIdentityTests(unittest.TestCase):
    def test_id_claim(self):
        identity = decode_identity(
            make_token({"id": 7, "email": "ada@example.com"}), SECRET
        )
        self.assertEqual(identity, Identity(user_id="7", email="ada@example.com"))

    def test_sub_claim_fallback(self):
        identity = decode_identity(make_token({"sub": "user-1"}), SECRET)
        self.assertEqual(identity.user_id, "user-1")

    def test_missing_or_unusable_tokens(self):
        self.assertIsNone(decode_identity(None, SECRET))
        self.assertIsNone(decode_identity(make_token({"id": 1}), None))
        self.assertIsNone(decode_identity(make_token({"email": "x@y"}), SECRET))

    def test_bad_signature_is_anonymous(self):
        token = make_token({"id": 1}, secret="other-secret")
        with self.assertLogs("snapper.access", level="INFO"):
            self.assertIsNone(decode_identity(token, SECRET))

    def test_expired_token_is_anonymous(self):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = make_token({"id": 1, "exp": int(past.timestamp())})
        with self.assertLogs("snapper.access", level="INFO"):
            self.assertIsNone(decode_identity(token, SECRET))


class AccessGateTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.gate = AccessGate(self.db)

    def test_signed_in_caller_passes_without_lookup(self):
        # Group does not even exist; signed-in callers are not checked here.
        self.gate.check(Identity(user_id="1"), 999)

    def test_anonymous_public_group(self):
        group = self.db.create_group("Open", access="PUBLIC")
        self.gate.check(None, group.id)

    def test_anonymous_private_group(self):
        group = self.db.create_group("Closed", access="private")
        with self.assertRaises(Forbidden) as ctx:
            self.gate.check(None, group.id)
        self.assertEqual(ctx.exception.status_code, 403)

    def test_anonymous_missing_group(self):
        with self.assertRaises(NotFound):
            self.gate.check(None, 12345)


if __name__ == "__main__":
    unittest.main()
