"""
Pytest fixtures and configuration for Shareholder Portal tests
"""
import os
import sys
from datetime import timedelta

import pytest

# Add app directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'app')))

from app import create_app
from cooldown_cache import CooldownCache, MemoryCooldownBackend
from db import db
from models.verification_session import VerificationSession
from repositories.shareholder_repository import ShareholderRepository
from settings import build_settings
from sms import SmsDeliveryError
from utils import now_utc

PRIMARY_UUID = "3f1c2a9e-8b4d-4c6f-9a1e-5d7b2c8f0a11"
NO_PHONE_UUID = "7a0e4d2b-1c9f-4e83-b5a6-0f2d9c1e7b22"
OVERRIDE_UUID = "c5d8e1f4-2a7b-4d90-8e3c-6b1a0f9d4c33"
UNKNOWN_UUID = "00000000-0000-4000-8000-000000000000"

SHAREHOLDERS = [
    {
        "shareholder_code": "000001",
        "uuid": PRIMARY_UUID,
        "name": "王小明",
        "id_last_four": "6789",
        "original_address": "信義路一段1號",
        "original_home_phone": "02-2345-6789",
        "original_mobile_phone": "0987654321",
    },
    {
        # No mobile number and no ID suffix on file
        "shareholder_code": "000002",
        "uuid": NO_PHONE_UUID,
        "name": "李大華",
        "id_last_four": None,
        "original_address": "中山路100號",
        "original_home_phone": None,
        "original_mobile_phone": "   ",
    },
    {
        # Updated mobile number overrides the original one
        "shareholder_code": "000003",
        "uuid": OVERRIDE_UUID,
        "name": "陳美玲",
        "id_last_four": "6789",
        "original_address": "民生東路5號",
        "original_mobile_phone": "0911111111",
        "updated_mobile_phone": "0922222222",
    },
]


class FakeSmsTransport:
    """Records messages instead of calling the gateway"""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, message, dest, subject=None):
        if self.fail:
            raise SmsDeliveryError("gateway unavailable")
        self.sent.append({"message": message, "dest": dest, "subject": subject})
        return "OK"


@pytest.fixture
def fake_sms():
    return FakeSmsTransport()


@pytest.fixture
def make_app(fake_sms):
    """Build an app on a fresh in-memory database with seeded shareholders"""

    def _make_app(test_mode=False, cooldown_seconds=60):
        settings = build_settings(
            {
                "portal": {"test_mode": test_mode},
                "verification": {"resend_cooldown_seconds": cooldown_seconds},
            },
            environ={},
        )
        app = create_app(
            settings=settings,
            config={"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://"},
            cooldown_cache=CooldownCache(MemoryCooldownBackend()),
            sms_transport=fake_sms,
        )
        with app.app_context():
            for row in SHAREHOLDERS:
                ShareholderRepository.create(**row)
        return app

    return _make_app


@pytest.fixture
def app(make_app):
    """Production-mode app: SMS dispatched, 60s resend cooldown"""
    return make_app(test_mode=False)


@pytest.fixture
def testmode_app(make_app):
    """Test-mode app: no dispatch, code echoed, no cooldown"""
    return make_app(test_mode=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def testmode_client(testmode_app):
    return testmode_app.test_client()


@pytest.fixture
def backdate_session():
    """Move a session's ACTION_TIME into the past"""

    def _backdate(app, log_id, seconds):
        with app.app_context():
            VerificationSession.query.filter_by(log_id=log_id).update(
                {VerificationSession.action_time: now_utc() - timedelta(seconds=seconds)},
                synchronize_session=False,
            )
            db.session.commit()

    return _backdate


@pytest.fixture
def issued_code(testmode_client):
    """Scan the primary shareholder and issue a code in test mode"""
    scan = testmode_client.get(f"/api/shareholder/qr-check/{PRIMARY_UUID}").get_json()["data"]
    response = testmode_client.post(
        "/api/shareholder/send-verification-code",
        json={"identifier": PRIMARY_UUID, "phoneNumber": "0987654321", "sessionId": scan["sessionId"]},
    )
    data = response.get_json()["data"]
    return {"sessionId": scan["sessionId"], "code": data["code"], "expiresAt": data["expiresAt"]}
