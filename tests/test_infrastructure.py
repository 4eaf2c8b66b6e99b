import os
import tempfile
import unittest
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import redis
from botocore.exceptions import ClientError

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from devcamper.core.config import Settings
from devcamper.core.security import (
    InvalidToken,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    issue_access_token,
    read_access_token,
    verify_password,
)
from devcamper.services.email_service import EmailDeliveryError, send_email
from devcamper.services.file_storage import (
    LocalFileStorage,
    S3FileStorage,
    StorageError,
    build_file_storage,
    safe_file_name,
)
from devcamper.services.rate_limit import InMemoryRateLimiter, RedisRateLimiter, build_rate_limiter


def _settings(**values):
    return Settings(DATABASE_URL="sqlite+pysqlite:///:memory:", **values)


class RateLimiterTests(unittest.TestCase):
    def test_in_memory_counts_per_key_within_window(self):
        now = [100.0]
        limiter = InMemoryRateLimiter(limit=2, window_seconds=60, clock=lambda: now[0])
        usages = [limiter.hit("ip:1") for _ in range(3)]
        self.assertEqual([u.allowed for u in usages], [True, True, False])
        self.assertEqual([u.remaining for u in usages], [1, 0, 0])
        self.assertEqual(usages[-1].reset_after_seconds, 60)
        self.assertTrue(limiter.hit("ip:2").allowed)

        now[0] += 61
        fresh = limiter.hit("ip:1")
        self.assertTrue(fresh.allowed)
        self.assertEqual(fresh.hits, 1)

    def test_redis_limiter_sets_expiry_on_first_hit(self):
        pipe = Mock()
        pipe.execute.return_value = [1, -1]
        client = Mock()
        client.pipeline.return_value = pipe
        usage = RedisRateLimiter(client, limit=5, window_seconds=600).hit("ip:1")
        pipe.incr.assert_called_once_with("devcamper:rate:ip:1")
        client.expire.assert_called_once_with("devcamper:rate:ip:1", 600)
        self.assertEqual((usage.hits, usage.remaining, usage.reset_after_seconds), (1, 4, 600))

    def test_redis_error_mid_request_counts_in_memory(self):
        pipe = Mock()
        pipe.execute.side_effect = redis.ConnectionError("down")
        client = Mock()
        client.pipeline.return_value = pipe
        limiter = RedisRateLimiter(client, limit=1, window_seconds=600)
        with self.assertLogs("devcamper.rate_limit", level="WARNING"):
            first = limiter.hit("ip:1")
            second = limiter.hit("ip:1")
        self.assertTrue(first.allowed)
        self.assertEqual(first.hits, 1)
        self.assertFalse(second.allowed)

    def test_empty_url_uses_memory(self):
        self.assertIsInstance(build_rate_limiter("", limit=1, window_seconds=1), InMemoryRateLimiter)

    def test_unreachable_redis_falls_back(self):
        client = Mock()
        client.ping.side_effect = redis.ConnectionError("down")
        with patch("devcamper.services.rate_limit.redis.Redis.from_url", return_value=client):
            with self.assertLogs("devcamper.rate_limit", level="WARNING"):
                limiter = build_rate_limiter("redis://localhost:6379/0", limit=1, window_seconds=1)
        self.assertIsInstance(limiter, InMemoryRateLimiter)


class FileStorageTests(unittest.TestCase):
    def test_safe_file_name(self):
        self.assertEqual(safe_file_name("../etc/pass wd.jpg"), ".._etc_pass_wd.jpg")
        self.assertEqual(safe_file_name(""), "file.bin")

    def test_local_storage_writes_under_root(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = build_file_storage(_settings(FILE_UPLOAD_PATH=str(Path(tmp) / "uploads")))
            self.assertIsInstance(storage, LocalFileStorage)
            name = storage.save("photo_1.jpg", b"abc", "image/jpeg")
            self.assertEqual(name, "photo_1.jpg")
            self.assertEqual((Path(tmp) / "uploads" / "photo_1.jpg").read_bytes(), b"abc")

    def test_unknown_backend(self):
        with self.assertRaises(StorageError):
            build_file_storage(_settings(FILE_STORAGE="floppy"))

    def test_s3_storage_puts_object_under_photos(self):
        client = Mock()
        with patch("devcamper.services.file_storage.boto3.client", return_value=client):
            storage = build_file_storage(_settings(FILE_STORAGE="s3", S3_BUCKET="camps"))
        self.assertIsInstance(storage, S3FileStorage)

        self.assertEqual(storage.save("photo_1.png", b"png", "image/png"), "photo_1.png")
        client.head_bucket.assert_called_once_with(Bucket="camps")
        client.put_object.assert_called_once_with(Bucket="camps", Key="photos/photo_1.png", Body=b"png", ContentType="image/png")

    def test_s3_failure_becomes_storage_error(self):
        client = Mock()
        client.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied"}}, "PutObject")
        with patch("devcamper.services.file_storage.boto3.client", return_value=client):
            storage = S3FileStorage(_settings(FILE_STORAGE="s3"))
        with self.assertRaises(StorageError):
            storage.save("photo_1.png", b"png")


class EmailServiceTests(unittest.TestCase):
    def test_dummy_provider_logs_instead_of_sending(self):
        with self.assertLogs("devcamper.email", level="WARNING"):
            payload = send_email(_settings(), email=" User@DevCamper.io ", subject="s", body="b")
        self.assertEqual(payload.get("provider"), "mock_email")
        self.assertFalse(payload.get("sent"))

    def test_smtp_without_host_raises(self):
        with self.assertRaises(EmailDeliveryError):
            send_email(_settings(EMAIL_PROVIDER="smtp", SMTP_HOST=""), email="u@devcamper.io", subject="s", body="b")

    def test_smtp_sends_message(self):
        smtp = Mock()
        smtp.__enter__ = Mock(return_value=smtp)
        smtp.__exit__ = Mock(return_value=False)
        settings = _settings(EMAIL_PROVIDER="smtp", SMTP_HOST="mail.local", SMTP_USER="bot", SMTP_PASSWORD="pw")
        with patch("devcamper.services.email_service.smtplib.SMTP", return_value=smtp):
            payload = send_email(settings, email="u@devcamper.io", subject="Reset", body="token")
        self.assertTrue(payload.get("sent"))
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("bot", "pw")
        sent = smtp.send_message.call_args.args[0]
        self.assertEqual(sent["To"], "u@devcamper.io")
        self.assertEqual(sent["Subject"], "Reset")

    def test_unknown_provider_raises(self):
        with self.assertRaises(EmailDeliveryError):
            send_email(_settings(EMAIL_PROVIDER="fax"), email="u@devcamper.io", subject="s", body="b")


class ResetTokenTests(unittest.TestCase):
    def test_only_hash_is_returned_for_storage(self):
        token, token_hash = generate_reset_token()
        self.assertEqual(len(token), 40)
        self.assertEqual(hash_reset_token(token), token_hash)
        self.assertNotEqual(token, token_hash)


class AccessTokenTests(unittest.TestCase):
    def test_token_round_trips_user_id(self):
        user_id = uuid.uuid4()
        token = issue_access_token(user_id, "publisher", "s3cret", expire_days=1)
        self.assertEqual(read_access_token(token, "s3cret"), user_id)

    def test_wrong_secret_and_expired_tokens_are_rejected(self):
        user_id = uuid.uuid4()
        with self.assertRaises(InvalidToken):
            read_access_token(issue_access_token(user_id, "user", "s3cret", expire_days=1), "other")
        issued_long_ago = datetime.now(timezone.utc) - timedelta(days=31)
        expired = issue_access_token(user_id, "user", "s3cret", expire_days=30, issued_at=issued_long_ago)
        with self.assertRaises(InvalidToken):
            read_access_token(expired, "s3cret")

    def test_subject_must_be_a_user_id(self):
        with self.assertRaises(InvalidToken):
            read_access_token(issue_access_token("admin", "admin", "s3cret", expire_days=1), "s3cret")

    def test_password_hash_verifies_only_the_original(self):
        stored = hash_password("secret123")
        self.assertTrue(verify_password("secret123", stored))
        self.assertFalse(verify_password("secret124", stored))
        self.assertFalse(verify_password("secret123", None))


if __name__ == "__main__":
    unittest.main()
