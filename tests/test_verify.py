"""
Tests for the verification engine
"""
from conftest import PRIMARY_UUID, NO_PHONE_UUID, UNKNOWN_UUID
from db import db
from exceptions import DEFAULT_MESSAGES, ErrorCode
from models.shareholder import Shareholder
from models.verification_event import VerificationEvent
from models.verification_session import VerificationSession

VERIFY_URL = "/api/shareholder/verify"
GENERIC_MESSAGE = DEFAULT_MESSAGES[ErrorCode.AUTHENTICATION_FAILED]


def _verify_phone(client, code, session_id=None, phone="0987654321"):
    payload = {"identifier": PRIMARY_UUID, "type": "phone", "secret": code, "phoneNumber": phone}
    if session_id:
        payload["sessionId"] = session_id
    return client.post(VERIFY_URL, json=payload)


def _wrong_code(code):
    return "1000" if code != "1000" else "1001"


def _login_count(app, code="000001"):
    with app.app_context():
        return db.session.get(Shareholder, code).login_count


class TestPhoneVerification:
    """Verifying with the code sent to the registered mobile number"""

    def test_issued_code_verifies(self, testmode_app, testmode_client, issued_code):
        response = _verify_phone(testmode_client, issued_code["code"], issued_code["sessionId"])
        data = response.get_json()["data"]

        assert response.status_code == 200
        assert data["verified"] is True
        assert data["sessionId"] == issued_code["sessionId"]
        assert data["profile"]["loginCount"] == 1

        with testmode_app.app_context():
            session = db.session.get(VerificationSession, issued_code["sessionId"])
            assert session.action_type == "verify"
            assert session.phone_verification_time is not None

    def test_submitted_code_is_trimmed(self, testmode_client, issued_code):
        response = _verify_phone(testmode_client, f" {issued_code['code']} ", issued_code["sessionId"])

        assert response.status_code == 200

    def test_other_code_fails_with_generic_message(self, testmode_app, testmode_client, issued_code):
        response = _verify_phone(testmode_client, _wrong_code(issued_code["code"]), issued_code["sessionId"])

        assert response.status_code == 401
        assert response.get_json()["error"] == {"code": "AUTHENTICATION_FAILED", "message": GENERIC_MESSAGE}
        assert _login_count(testmode_app) == 0

    def test_code_still_valid_at_59_seconds(self, testmode_app, testmode_client, issued_code, backdate_session):
        backdate_session(testmode_app, issued_code["sessionId"], 59)

        assert _verify_phone(testmode_client, issued_code["code"], issued_code["sessionId"]).status_code == 200

    def test_code_expired_at_61_seconds(self, testmode_app, testmode_client, issued_code, backdate_session):
        backdate_session(testmode_app, issued_code["sessionId"], 61)

        response = _verify_phone(testmode_client, issued_code["code"], issued_code["sessionId"])

        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == GENERIC_MESSAGE
        with testmode_app.app_context():
            event = VerificationEvent.query.filter_by(event_type="verification_failed").one()
            assert event.details == {"type": "phone", "reason": "expired"}

    def test_code_is_reusable_within_ttl(self, testmode_app, testmode_client, issued_code):
        assert _verify_phone(testmode_client, issued_code["code"], issued_code["sessionId"]).status_code == 200
        assert _verify_phone(testmode_client, issued_code["code"], issued_code["sessionId"]).status_code == 200
        assert _login_count(testmode_app) == 2

    def test_only_latest_code_counts(self, testmode_client, issued_code):
        again = testmode_client.post(
            "/api/shareholder/send-verification-code",
            json={"identifier": PRIMARY_UUID, "phoneNumber": "0987654321", "sessionId": issued_code["sessionId"]},
        ).get_json()["data"]

        if again["code"] != issued_code["code"]:
            assert _verify_phone(testmode_client, issued_code["code"]).status_code == 401
        assert _verify_phone(testmode_client, again["code"]).status_code == 200

    def test_no_code_issued(self, testmode_client):
        assert _verify_phone(testmode_client, "1234").status_code == 401

    def test_phone_must_match(self, testmode_client, issued_code):
        response = _verify_phone(testmode_client, issued_code["code"], issued_code["sessionId"], phone="0900000000")

        assert response.status_code == 401

    def test_phone_number_required(self, testmode_client):
        response = testmode_client.post(
            VERIFY_URL, json={"identifier": PRIMARY_UUID, "type": "phone", "secret": "1234"}
        )

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "MISSING_REQUIRED_FIELD"

    def test_without_session_id_a_new_row_is_inserted(self, testmode_app, testmode_client, issued_code):
        data = _verify_phone(testmode_client, issued_code["code"]).get_json()["data"]

        assert data["sessionId"] != issued_code["sessionId"]
        with testmode_app.app_context():
            assert db.session.get(VerificationSession, data["sessionId"]).action_type == "verify"


class TestIdVerification:
    """Verifying with the last four digits of the national ID"""

    def _verify_id(self, client, identifier, suffix, session_id=None):
        payload = {"identifier": identifier, "type": "id", "secret": suffix}
        if session_id:
            payload["sessionId"] = session_id
        return client.post(VERIFY_URL, json=payload)

    def test_matching_suffix_verifies(self, app, client):
        session_id = client.get(f"/api/shareholder/qr-check/{PRIMARY_UUID}").get_json()["data"]["sessionId"]

        response = self._verify_id(client, PRIMARY_UUID, "6789", session_id)

        assert response.status_code == 200
        assert response.get_json()["data"]["profile"]["loginCount"] == 1
        with app.app_context():
            session = db.session.get(VerificationSession, session_id)
            assert session.action_type == "verify"
            assert session.verification_type == "id"

    def test_wrong_suffix_fails(self, app, client):
        response = self._verify_id(client, PRIMARY_UUID, "0000")

        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == GENERIC_MESSAGE
        assert _login_count(app) == 0

    def test_no_suffix_on_file_always_fails(self, client):
        for suffix in ("0000", "6789", "1234"):
            assert self._verify_id(client, NO_PHONE_UUID, suffix).status_code == 401

    def test_malformed_suffix(self, client):
        response = self._verify_id(client, PRIMARY_UUID, "67a9")

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_FORMAT"

    def test_failure_is_recorded_without_touching_the_session(self, app, client):
        session_id = client.get(f"/api/shareholder/qr-check/{PRIMARY_UUID}").get_json()["data"]["sessionId"]

        self._verify_id(client, PRIMARY_UUID, "0000", session_id)

        with app.app_context():
            assert db.session.get(VerificationSession, session_id).action_type == "visit"
            event = VerificationEvent.query.filter_by(log_id=session_id, event_type="verification_failed").one()
            assert event.details["reason"] == "id_mismatch"
            assert VerificationSession.query.count() == 1
            assert VerificationEvent.query.count() == 2
        assert _login_count(app) == 0


class TestVerifyInput:
    def test_unknown_type(self, client):
        response = client.post(VERIFY_URL, json={"identifier": PRIMARY_UUID, "type": "email", "secret": "1234"})

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_FORMAT"

    def test_missing_type(self, client):
        response = client.post(VERIFY_URL, json={"identifier": PRIMARY_UUID, "secret": "1234"})

        assert response.get_json()["error"]["code"] == "MISSING_REQUIRED_FIELD"

    def test_missing_secret(self, client):
        response = client.post(VERIFY_URL, json={"identifier": PRIMARY_UUID, "type": "id"})

        assert response.get_json()["error"]["code"] == "MISSING_REQUIRED_FIELD"

    def test_malformed_identifier(self, client):
        response = client.post(VERIFY_URL, json={"identifier": "000001", "type": "id", "secret": "6789"})

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_FORMAT"

    def test_unknown_identifier(self, client):
        response = client.post(VERIFY_URL, json={"identifier": UNKNOWN_UUID, "type": "id", "secret": "6789"})

        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "QR_CODE_INVALID"
