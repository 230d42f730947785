"""Unit tests for webhook signature verification."""

from deployhook.services.signature import sign_payload, verify_webhook_payload

SECRET = "It's a Secret to Everybody"
BODY = b"Hello, World!"


class TestVerifyWebhookPayload:
    """Tests for verify_webhook_payload."""

    def test_matches_github_reference_signature(self):
        # Example from GitHub's webhook validation docs
        expected = "sha256=757107ea0eb2509fc211221cce984b8a37570b6d7586c22c46f4379c8b043e17"

        assert sign_payload(BODY, SECRET) == expected
        assert verify_webhook_payload(BODY, expected, SECRET) is True

    def test_rejects_tampered_body(self):
        signature = sign_payload(BODY, SECRET)
        assert verify_webhook_payload(b"Hello, World?", signature, SECRET) is False

    def test_rejects_missing_header(self):
        assert verify_webhook_payload(BODY, None, SECRET) is False

    def test_rejects_sha1_header(self):
        assert verify_webhook_payload(BODY, "sha1=deadbeef", SECRET) is False

    def test_rejects_everything_without_secret(self):
        assert verify_webhook_payload(BODY, sign_payload(BODY, ""), "") is False
