"""Tests for /profiles (update, email verification) and /explore search."""

from datetime import timedelta

from fakes import ApiTestCase

from localhub.core import config
from localhub.explore.routers import clean_term, ilike_any
from localhub.utils.clock import isoformat, utcnow


class TestUpdateProfile(ApiTestCase):
    def _profile(self) -> dict:
        return next(p for p in self.db.rows("profiles") if p["id"] == self.user_id)

    def test_updates_whitelisted_fields(self) -> None:
        res = self.post(
            "/profiles/update",
            {"bio": "Gardener", "show_email": False, "email_verified": True},
        )
        self.assertEqual(res.status_code, 200)
        profile = self._profile()
        self.assertEqual(profile["bio"], "Gardener")
        self.assertFalse(profile["show_email"])
        self.assertFalse(profile["email_verified"])

    def test_nothing_to_update(self) -> None:
        res = self.post("/profiles/update", {"email_verified": True})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "No fields to update"})

    def test_taken_username(self) -> None:
        self.sign_in("bob")
        res = self.post("/profiles/update", {"username": "Bob"})
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json(), {"error": "Username already taken."})
        self.assertEqual(self._profile()["username"], "alice")


class TestVerifyEmail(ApiTestCase):
    def _set_token(self, sent_ago: timedelta) -> str:
        profile = next(p for p in self.db.rows("profiles") if p["id"] == self.user_id)
        profile["email_verification_token"] = "verify-me"
        profile["email_verification_sent_at"] = isoformat(utcnow() - sent_ago)
        return "verify-me"

    def test_valid_token_verifies_once(self) -> None:
        token = self._set_token(timedelta(hours=1))
        res = self.client.post("/profiles/verify-email", json={"token": token})
        self.assertEqual(res.json(), {"success": True, "message": "Email verified successfully"})

        profile = self.db.rows("profiles")[0]
        self.assertTrue(profile["email_verified"])
        self.assertTrue(profile["is_verified"])
        self.assertIsNone(profile["email_verification_token"])

        res = self.client.post("/profiles/verify-email", json={"token": token})
        self.assertEqual(res.status_code, 400)

    def test_expired_token(self) -> None:
        token = self._set_token(timedelta(hours=config.EMAIL_VERIFICATION_TTL_HOURS + 1))
        res = self.client.post("/profiles/verify-email", json={"token": token})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(
            res.json(),
            {"error": "Verification token has expired. Please request a new one."},
        )
        self.assertFalse(self.db.rows("profiles")[0]["email_verified"])


class TestExplore(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.db.seed("businesses", owner_id=self.user_id, name="Green Thumb Nursery",
                     category="garden", is_featured=True)
        self.db.seed("businesses", owner_id=self.user_id, name="Bakery", category="food")
        self.db.seed("communities", created_by=self.user_id, name="Garden Club",
                     description="Weekend gardening")

    def test_clean_term_strips_filter_syntax(self) -> None:
        self.assertEqual(clean_term(" a,b(c)%d_e* "), "a b c d e")
        self.assertEqual(
            ilike_any(("name", "bio"), "gar"), "name.ilike.%gar%,bio.ilike.%gar%"
        )

    def test_search_across_entities(self) -> None:
        res = self.client.post("/explore", json={"action": "search", "query": "GARDEN"})
        body = res.json()
        self.assertEqual([b["name"] for b in body["businesses"]], [])
        self.assertEqual([c["name"] for c in body["communities"]], ["Garden Club"])
        self.assertEqual(body["total"], 1)

        res = self.client.post("/explore", json={"action": "search", "query": "ali"})
        self.assertEqual([u["username"] for u in res.json()["users"]], ["alice"])

    def test_blank_query(self) -> None:
        res = self.client.post("/explore", json={"action": "search", "query": " , "})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Search query is required"})

    def test_category_and_trending(self) -> None:
        res = self.client.post("/explore", json={"action": "category", "category": "food"})
        self.assertEqual([b["name"] for b in res.json()["businesses"]], ["Bakery"])

        res = self.client.post("/explore", json={"action": "trending"})
        self.assertEqual([b["name"] for b in res.json()["businesses"]], ["Green Thumb Nursery"])
