"""Unit tests for the environment helpers behind localhub.core.config."""

import os
import unittest
from unittest.mock import patch

from fakes import ApiTestCase

from localhub.utils.env_helper import env_bool, env_int, env_list


class TestEnvHelpers(unittest.TestCase):
    def test_env_bool(self) -> None:
        with patch.dict(os.environ, {"FLAG": "Yes"}):
            self.assertTrue(env_bool("FLAG"))
        with patch.dict(os.environ, {"FLAG": "off"}):
            self.assertFalse(env_bool("FLAG", default=True))
        with patch.dict(os.environ, {}, clear=True):
            self.assertTrue(env_bool("FLAG", default=True))

    def test_env_int(self) -> None:
        with patch.dict(os.environ, {"N": "12"}):
            self.assertEqual(env_int("N", 3), 12)
        with patch.dict(os.environ, {"N": " "}):
            self.assertEqual(env_int("N", 3), 3)
        with patch.dict(os.environ, {"N": "ten"}):
            with self.assertRaises(ValueError):
                env_int("N", 3)

    def test_env_list(self) -> None:
        with patch.dict(os.environ, {"ORIGINS": "http://a, ,http://b"}):
            self.assertEqual(env_list("ORIGINS", []), ["http://a", "http://b"])
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(env_list("ORIGINS", ["x"]), ["x"])


class TestAppShell(ApiTestCase):
    def test_health_and_request_id(self) -> None:
        res = self.client.get("/health")
        self.assertEqual(res.json(), {"status": "ok"})
        self.assertIn("x-request-id", res.headers)

    def test_missing_action_is_400(self) -> None:
        res = self.post("/messaging", {})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Action is required"})
