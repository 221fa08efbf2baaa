"""Tests for /businesses: owner management and follow/unfollow."""

from fakes import ApiTestCase, new_id


class TestManageBusiness(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.business = self.db.seed(
            "businesses", owner_id=self.user_id, name="Bakery", category="food"
        )
        self.db.seed("businesses", owner_id=new_id(), name="Elsewhere")
        self.db.seed("business_follows", business_id=self.business["id"], user_id=new_id())

    def test_list_only_own_businesses_with_followers(self) -> None:
        res = self.post("/businesses/manage", {"action": "list"})
        businesses = res.json()["businesses"]
        self.assertEqual([b["name"] for b in businesses], ["Bakery"])
        self.assertEqual(businesses[0]["follower_count"], 1)

    def test_update_only_whitelisted_fields(self) -> None:
        res = self.post(
            "/businesses/manage",
            {
                "action": "update",
                "business_id": self.business["id"],
                "description": "Fresh bread daily",
                "approval_status": "approved",
            },
        )
        self.assertEqual(res.status_code, 200)
        row = self.db.rows("businesses")[0]
        self.assertEqual(row["description"], "Fresh bread daily")
        self.assertEqual(row["approval_status"], "pending")

    def test_update_without_fields(self) -> None:
        res = self.post(
            "/businesses/manage", {"action": "update", "business_id": self.business["id"]}
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "No fields to update"})

    def test_non_owner_is_forbidden(self) -> None:
        _, token = self.sign_in("mallory")
        res = self.post(
            "/businesses/manage",
            {"action": "delete", "business_id": self.business["id"]},
            token=token,
        )
        self.assertEqual(res.status_code, 403)
        self.assertEqual(len(self.db.rows("businesses")), 2)

    def test_delete_and_missing(self) -> None:
        res = self.post(
            "/businesses/manage", {"action": "delete", "business_id": self.business["id"]}
        )
        self.assertEqual(res.json(), {"success": True})

        res = self.post(
            "/businesses/manage", {"action": "delete", "business_id": self.business["id"]}
        )
        self.assertEqual(res.status_code, 404)


class TestBusinessFollow(ApiTestCase):
    def test_follow_twice_then_unfollow(self) -> None:
        business_id = self.db.seed("businesses", owner_id=new_id(), name="Cafe")["id"]
        body = {"action": "follow", "business_id": business_id}

        self.assertEqual(self.post("/businesses/follow", body).json(), {"success": True, "message": None})
        self.assertEqual(
            self.post("/businesses/follow", body).json(),
            {"success": True, "message": "Already following"},
        )
        self.assertEqual(len(self.db.rows("business_follows")), 1)

        res = self.post("/businesses/follow", {"action": "unfollow", "business_id": business_id})
        self.assertEqual(res.json()["success"], True)
        self.assertEqual(self.db.rows("business_follows"), [])

    def test_follow_requires_business_id(self) -> None:
        res = self.post("/businesses/follow", {"action": "follow"})
        self.assertEqual(res.status_code, 400)
