import re
import sys
import unittest
from datetime import timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from api_support import ApiTestCase, DatabaseTestCase  # noqa: E402
from resai.core.clock import utc_now  # noqa: E402
from resai.core.errors import ValidationError  # noqa: E402
from resai.models import AccessCode, User  # noqa: E402
from resai.services import access_code_service  # noqa: E402

CODE_RE = re.compile(r"^RES-[A-Z0-9]{4}-[A-Z0-9]{4}$")


class AccessCodeServiceTests(DatabaseTestCase):
    def _user(self, email="jane@example.com", premium_until=None) -> User:
        user = User(email=email, password_hash="x", premium_until=premium_until)
        self.db.add(user)
        self.db.commit()
        return user

    def test_generate_produces_formatted_unused_code(self):
        code = access_code_service.generate(self.db, 30, "launch promo")
        self.assertRegex(code.code, CODE_RE)
        self.assertFalse(code.is_used)
        self.assertEqual(code.duration_days, 30)
        self.assertEqual(code.notes, "launch promo")

    def test_bulk_generation_yields_distinct_unused_codes(self):
        codes = access_code_service.generate_bulk(self.db, 5, 30)
        self.assertEqual(len(codes), 5)
        self.assertEqual(len({code.code for code in codes}), 5)
        for code in codes:
            self.assertTrue(code.code.startswith("RES-"))
            self.assertFalse(code.is_used)

    def test_bulk_generation_bounds(self):
        for count in (0, 101):
            with self.subTest(count=count):
                with self.assertRaises(ValidationError):
                    access_code_service.generate_bulk(self.db, count, 30)

    def test_activation_without_premium_starts_from_now(self):
        user = self._user()
        code = access_code_service.generate(self.db, 30)

        before = utc_now()
        self.assertTrue(access_code_service.activate(self.db, code.code, user.id))
        after = utc_now()

        self.assertGreaterEqual(user.premium_until, before + timedelta(days=30))
        self.assertLessEqual(user.premium_until, after + timedelta(days=30))
        self.assertTrue(code.is_used)
        self.assertEqual(code.used_by_user_id, user.id)
        self.assertEqual(code.expires_at, code.activated_at + timedelta(days=30))

    def test_activation_extends_running_premium(self):
        current = utc_now() + timedelta(days=10)
        user = self._user(premium_until=current)
        code = access_code_service.generate(self.db, 30)

        self.assertTrue(access_code_service.activate(self.db, code.code, user.id))
        self.assertEqual(user.premium_until, current + timedelta(days=30))

    def test_activation_after_expiry_restarts_from_now(self):
        user = self._user(premium_until=utc_now() - timedelta(days=3))
        code = access_code_service.generate(self.db, 7)

        before = utc_now()
        self.assertTrue(access_code_service.activate(self.db, code.code, user.id))
        self.assertGreaterEqual(user.premium_until, before + timedelta(days=7))

    def test_lookup_ignores_case_and_whitespace(self):
        user = self._user()
        code = access_code_service.generate(self.db, 30)
        self.assertTrue(access_code_service.activate(self.db, f"  {code.code.lower()} ", user.id))

    def test_used_code_cannot_be_activated_again(self):
        first = self._user()
        second = self._user("other@example.com")
        code = access_code_service.generate(self.db, 30)
        self.assertTrue(access_code_service.activate(self.db, code.code, first.id))

        self.assertFalse(access_code_service.activate(self.db, code.code, second.id))
        self.assertIsNone(second.premium_until)
        self.assertEqual(code.used_by_user_id, first.id)

    def test_unknown_code_or_user_fails(self):
        user = self._user()
        self.assertFalse(access_code_service.activate(self.db, "RES-0000-0000", user.id))
        code = access_code_service.generate(self.db, 30)
        self.assertFalse(access_code_service.activate(self.db, code.code, 9999))
        self.assertFalse(code.is_used)

    def test_used_code_cannot_be_deleted(self):
        user = self._user()
        code = access_code_service.generate(self.db, 30)
        access_code_service.activate(self.db, code.code, user.id)

        self.assertFalse(access_code_service.delete(self.db, code.id))
        self.assertIsNotNone(self.db.get(AccessCode, code.id))

    def test_unused_code_can_be_deleted(self):
        code = access_code_service.generate(self.db, 30)
        self.assertTrue(access_code_service.delete(self.db, code.id))
        self.assertIsNone(self.db.get(AccessCode, code.id))
        self.assertFalse(access_code_service.delete(self.db, code.id))

    def test_listings_and_statistics(self):
        user = self._user()
        codes = access_code_service.generate_bulk(self.db, 3, 30)
        access_code_service.activate(self.db, codes[0].code, user.id)

        self.assertEqual(len(access_code_service.list_all(self.db)), 3)
        self.assertEqual([c.id for c in access_code_service.list_used(self.db)], [codes[0].id])
        self.assertEqual(len(access_code_service.list_unused(self.db)), 2)
        self.assertEqual(
            access_code_service.statistics(self.db),
            {"total": 3, "used": 1, "unused": 2, "recent": 3},
        )


class ActivateCodeApiTests(ApiTestCase):
    def test_activation_endpoint_grants_premium(self):
        headers = self.register()
        db = self.SessionTesting()
        try:
            code = access_code_service.generate(db, 30).code
        finally:
            db.close()

        response = self.client.post("/api/users/activate-code", json={"code": code}, headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.assertIsNotNone(response.json()["premiumUntil"])
        self.assertTrue(self.client.get("/api/users/me", headers=headers).json()["isPremium"])

        again = self.client.post("/api/users/activate-code", json={"code": code}, headers=headers)
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["code"], "invalid_access_code")


if __name__ == "__main__":
    unittest.main()
