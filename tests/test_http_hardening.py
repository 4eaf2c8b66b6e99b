import unittest
from unittest.mock import Mock

import redis
from fastapi.testclient import TestClient

from devcamper.services.rate_limit import RedisRateLimiter
from tests.base import ApiTestBase


class HttpHardeningTests(ApiTestBase):
    def test_health_has_security_headers_and_request_id(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)

        self.assertEqual(response.headers.get("x-content-type-options"), "nosniff")
        self.assertEqual(response.headers.get("x-frame-options"), "SAMEORIGIN")
        self.assertEqual(response.headers.get("referrer-policy"), "no-referrer")
        self.assertEqual(response.headers.get("x-dns-prefetch-control"), "off")
        self.assertEqual(response.headers.get("cache-control"), "no-store")

        request_id = response.headers.get("x-request-id")
        self.assertIsNotNone(request_id)
        self.assertRegex(str(request_id), r"^[A-Za-z0-9._-]{1,128}$")

    def test_valid_request_id_is_preserved(self):
        response = self.client.get("/health", headers={"X-Request-ID": "release-check-2026_10_17"})
        self.assertEqual(response.headers.get("x-request-id"), "release-check-2026_10_17")

    def test_invalid_request_id_is_replaced(self):
        response = self.client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
        self.assertNotEqual(response.headers.get("x-request-id"), "bad id with spaces")

    def test_error_response_keeps_security_headers_and_envelope(self):
        response = self.client.get("/api/v1/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "error": "Not authorized to access this route"})
        self.assertEqual(response.headers.get("x-content-type-options"), "nosniff")
        self.assertTrue(bool(response.headers.get("x-request-id")))

    def test_unknown_route_uses_error_envelope(self):
        response = self.client.get("/api/v1/nowhere")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()["success"])

    def test_unhandled_error_is_generic_500(self):
        @self.app.get("/boom")
        def boom():
            raise RuntimeError("kaboom")

        client = TestClient(self.app, raise_server_exceptions=False)
        with self.assertLogs("devcamper.errors", level="ERROR"):
            response = client.get("/boom")
        client.close()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "error": "Server Error"})


class RateLimitTests(ApiTestBase):
    settings_overrides = {"RATE_LIMIT_MAX_REQUESTS": 3}

    def test_requests_over_limit_get_429(self):
        first = self.client.get("/health")
        self.assertEqual(first.headers.get("x-ratelimit-limit"), "3")
        self.assertEqual(first.headers.get("x-ratelimit-remaining"), "2")

        statuses = [self.client.get("/health").status_code for _ in range(3)]
        self.assertEqual(statuses, [200, 200, 429])

        blocked = self.client.get("/health")
        self.assertEqual(blocked.json(), {"success": False, "error": "Too many requests, please try again later"})
        self.assertTrue(int(blocked.headers["retry-after"]) > 0)
        self.assertEqual(blocked.headers.get("x-content-type-options"), "nosniff")

    def test_redis_outage_does_not_fail_requests(self):
        pipe = Mock()
        pipe.execute.side_effect = redis.ConnectionError("down")
        client = Mock()
        client.pipeline.return_value = pipe
        self.app.state.rate_limiter = RedisRateLimiter(client, limit=3, window_seconds=600)
        with self.assertLogs("devcamper.rate_limit", level="WARNING"):
            response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers.get("x-ratelimit-remaining"), "2")


if __name__ == "__main__":
    unittest.main()
