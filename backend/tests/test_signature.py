"""Signature verification tests"""
import json
import time

import pytest

from conftest import TEST_WEBHOOK_SECRET, make_event_payload, sign_payload
from webhook_ledger.core.exceptions import (
    InvalidSignatureError, MissingSecretError, MissingSignatureError
)
from webhook_ledger.services.signature_service import VerifiedEvent, verify_webhook


@pytest.mark.critical
class TestVerifyWebhook:
    """Test verify_webhook() against the provider signature scheme"""

    def test_valid_signature_returns_event(self):
        """Raw bytes with a correct signature decode to a VerifiedEvent"""
        payload = make_event_payload("evt_1", "payment_intent.succeeded")

        event = verify_webhook(payload, sign_payload(payload), TEST_WEBHOOK_SECRET)

        assert isinstance(event, VerifiedEvent)
        assert event.id == "evt_1"
        assert event.type == "payment_intent.succeeded"
        assert event.body == json.loads(payload)
        assert event.data_object["id"] == "pi_123"

    def test_reserialized_payload_fails(self):
        """Parsing and re-serializing the body breaks verification even though it is equivalent"""
        payload = make_event_payload()
        signature = sign_payload(payload)
        reserialized = json.dumps(json.loads(payload)).encode("utf-8")
        assert reserialized != payload

        with pytest.raises(InvalidSignatureError):
            verify_webhook(reserialized, signature, TEST_WEBHOOK_SECRET)

    def test_parsed_object_is_rejected(self):
        """A dict is never accepted in place of the raw bytes"""
        payload = make_event_payload()

        with pytest.raises(TypeError):
            verify_webhook(json.loads(payload), sign_payload(payload), TEST_WEBHOOK_SECRET)

    def test_bytearray_payload_accepted(self):
        payload = make_event_payload()
        event = verify_webhook(bytearray(payload), sign_payload(payload), TEST_WEBHOOK_SECRET)
        assert event.id == "evt_1"

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_signature(self, header):
        """Missing header short-circuits before the secret is looked at"""
        with pytest.raises(MissingSignatureError) as exc:
            verify_webhook(b"not even json", header, None)
        assert exc.value.status_code == 400

    def test_missing_secret(self):
        """No configured secret is a server-side error, not a client one"""
        payload = make_event_payload()

        with pytest.raises(MissingSecretError) as exc:
            verify_webhook(payload, sign_payload(payload), "")
        assert exc.value.status_code == 500

    def test_wrong_secret(self):
        payload = make_event_payload()
        signature = sign_payload(payload, secret="whsec_someone_else")

        with pytest.raises(InvalidSignatureError):
            verify_webhook(payload, signature, TEST_WEBHOOK_SECRET)

    def test_tampered_payload(self):
        payload = make_event_payload(data_object={"id": "pi_123", "amount": 2000})
        signature = sign_payload(payload)
        tampered = payload.replace(b"2000", b"9000")

        with pytest.raises(InvalidSignatureError):
            verify_webhook(tampered, signature, TEST_WEBHOOK_SECRET)

    def test_expired_timestamp(self):
        """Signatures older than the tolerance are rejected"""
        payload = make_event_payload()
        signature = sign_payload(payload, timestamp=int(time.time()) - 3600)

        with pytest.raises(InvalidSignatureError):
            verify_webhook(payload, signature, TEST_WEBHOOK_SECRET, tolerance=300)

    def test_malformed_header(self):
        payload = make_event_payload()

        with pytest.raises(InvalidSignatureError):
            verify_webhook(payload, "garbage", TEST_WEBHOOK_SECRET)

    def test_signed_non_json_payload(self):
        """A correctly signed body that is not JSON is still rejected"""
        payload = b"definitely not json"

        with pytest.raises(InvalidSignatureError):
            verify_webhook(payload, sign_payload(payload), TEST_WEBHOOK_SECRET)

    def test_signed_payload_without_event_id(self):
        payload = json.dumps({"type": "customer.created", "data": {"object": {}}}).encode()

        with pytest.raises(InvalidSignatureError):
            verify_webhook(payload, sign_payload(payload), TEST_WEBHOOK_SECRET)

    @pytest.mark.parametrize("payload", [b"[]", b'"hello"', b"42", b"null"])
    def test_signed_json_that_is_not_an_object(self, payload):
        """Valid signature over a JSON value that is not an event object"""
        with pytest.raises(InvalidSignatureError) as exc:
            verify_webhook(payload, sign_payload(payload), TEST_WEBHOOK_SECRET)
        assert exc.value.status_code == 400
