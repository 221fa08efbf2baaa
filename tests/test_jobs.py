"""Tests for /jobs: listing, expiry, applications and closing."""

from datetime import timedelta

from fakes import ApiTestCase, new_id

from localhub.core import config
from localhub.utils.clock import isoformat, parse_timestamp, utcnow


class TestJobs(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.employer_id, self.employer_token = self.sign_in("employer")

    def _seed_job(self, **overrides) -> dict:
        fields = {
            "creator_id": self.employer_id,
            "title": "Barista",
            "description": "Morning shifts",
            "expires_at": isoformat(utcnow() + timedelta(days=3)),
        }
        fields.update(overrides)
        return self.db.seed("jobs", **fields)

    def _apply(self, job_id: str, token: str | None = None):
        return self.post("/jobs", {"action": "apply", "job_id": job_id}, token=token)

    def test_list_is_public_and_closes_expired(self) -> None:
        self._seed_job()
        self._seed_job(title="Old", expires_at=isoformat(utcnow() - timedelta(hours=1)))
        self._seed_job(title="Forever", expires_at=None)

        res = self.client.post("/jobs", json={"action": "list"})
        self.assertEqual(res.status_code, 200)
        jobs = {job["title"]: job for job in res.json()["jobs"]}
        self.assertEqual(jobs["Old"]["status"], "closed")
        self.assertEqual(jobs["Barista"]["status"], "open")
        self.assertEqual(jobs["Forever"]["status"], "open")
        self.assertEqual(jobs["Barista"]["application_count"], 0)

    def test_create_requires_session(self) -> None:
        res = self.client.post(
            "/jobs", json={"action": "create", "title": "Cook", "description": "Nights"}
        )
        self.assertEqual(res.status_code, 401)

    def test_create_defaults_expiry(self) -> None:
        res = self.post("/jobs", {"action": "create", "title": "Cook", "description": "Nights"})
        job = res.json()["job"]
        self.assertEqual(job["creator_id"], self.user_id)
        remaining = parse_timestamp(job["expires_at"]) - utcnow()
        self.assertAlmostEqual(
            remaining.total_seconds(),
            timedelta(days=config.DEFAULT_JOB_EXPIRY_DAYS).total_seconds(),
            delta=60,
        )

    def test_apply_once(self) -> None:
        job = self._seed_job()
        self.assertEqual(self._apply(job["id"]).status_code, 200)

        res = self._apply(job["id"])
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json(), {"error": "You have already applied to this job"})
        self.assertEqual(len(self.db.rows("job_applications")), 1)

    def test_cannot_apply_to_own_closed_or_full_job(self) -> None:
        own = self._seed_job()
        self.assertEqual(self._apply(own["id"], token=self.employer_token).status_code, 400)

        closed = self._seed_job(status="closed")
        self.assertEqual(self._apply(closed["id"]).status_code, 400)

        full = self._seed_job(max_applications=1)
        self.db.seed("job_applications", job_id=full["id"], applicant_id=new_id())
        res = self._apply(full["id"])
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "This job has reached its application limit"})

    def test_missing_job(self) -> None:
        self.assertEqual(self._apply(new_id()).status_code, 404)

    def test_only_creator_closes(self) -> None:
        job = self._seed_job()
        res = self.post("/jobs", {"action": "close", "job_id": job["id"]})
        self.assertEqual(res.status_code, 403)

        res = self.post("/jobs", {"action": "close", "job_id": job["id"]}, token=self.employer_token)
        self.assertEqual(res.json(), {"success": True})
        self.assertEqual(self.db.rows("jobs")[0]["status"], "closed")
