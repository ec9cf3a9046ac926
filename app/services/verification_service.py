"""
Service layer for verifying a scanned shareholder

Two exclusive methods: the 4-digit code sent to the registered mobile
number, or the last four digits of the national ID. Every rejection is
an AuthenticationException with the same client-facing message; the
internal reason only reaches logs, metrics and the audit stream.
"""
import logging

from constants import (
    ACTION_VERIFY,
    CODE_TTL_SECONDS,
    EVENT_VERIFIED,
    EVENT_VERIFICATION_FAILED,
    VERIFICATION_ID,
    VERIFICATION_PHONE,
    VERIFICATION_TYPES,
)
from exceptions import AuthenticationException, InvalidFormatException, MissingFieldException, QrCodeInvalidException
from metrics import verifications_total
from repositories.shareholder_repository import ShareholderRepository
from repositories.verification_session_repository import VerificationSessionRepository
from services.audit_service import record_transition
from services.validation import validate_identifier, validate_four_digits
from utils import now_utc, ensure_utc

logger = logging.getLogger("main")


def _check_phone_code(shareholder, phone_number, code, now):
    if phone_number != shareholder.effective_mobile_phone:
        raise AuthenticationException(reason="phone_mismatch")

    latest = VerificationSessionRepository.latest_issued_code(shareholder.uuid, phone_number)
    if latest is None or not latest.random_code:
        raise AuthenticationException(reason="not_issued")

    elapsed = (now - ensure_utc(latest.action_time)).total_seconds()
    if elapsed > CODE_TTL_SECONDS:
        raise AuthenticationException(reason="expired")

    if code != latest.random_code.strip():
        raise AuthenticationException(reason="incorrect")


def _check_id_suffix(shareholder, suffix):
    if not shareholder.id_last_four:
        raise AuthenticationException(reason="no_id_on_file")
    if suffix != shareholder.id_last_four:
        raise AuthenticationException(reason="id_mismatch")

    # The suffix lookup must lead back to the scanned shareholder
    if shareholder.shareholder_code not in ShareholderRepository.find_codes_by_id_last_four(suffix):
        raise AuthenticationException(reason="id_mismatch")


def verify(identifier, verification_type, secret, phone_number=None, log_id=None):
    """
    Verify the person holding the QR code.

    Args:
        identifier: QR identifier (UUID)
        verification_type: 'phone' or 'id'
        secret: The 4-digit phone code or ID suffix
        phone_number: Registered mobile number, required for 'phone'
        log_id: Session opened by the QR check; without it a new
                session row is inserted

    Returns:
        {verified: True, profile, sessionId}
    """
    identifier = validate_identifier(identifier)
    if not verification_type:
        raise MissingFieldException("Verification type is required")
    if verification_type not in VERIFICATION_TYPES:
        raise InvalidFormatException("Verification type must be 'phone' or 'id'")

    if verification_type == VERIFICATION_PHONE:
        secret = validate_four_digits(secret, "Verification code")
        if phone_number is None or not str(phone_number).strip():
            raise MissingFieldException("Phone number is required")
    else:
        secret = validate_four_digits(secret, "ID last four digits")

    shareholder = ShareholderRepository.get_by_uuid(identifier)
    if shareholder is None:
        raise QrCodeInvalidException()

    now = now_utc()
    try:
        if verification_type == VERIFICATION_PHONE:
            _check_phone_code(shareholder, phone_number, secret, now)
        else:
            _check_id_suffix(shareholder, secret)
    except AuthenticationException as e:
        verifications_total.labels(type=verification_type, outcome=e.reason).inc()
        logger.warning(
            f"Verification failed for shareholder {shareholder.shareholder_code}: "
            f"type={verification_type} reason={e.reason}"
        )
        record_transition(
            EVENT_VERIFICATION_FAILED,
            shareholder,
            log_id=log_id,
            details={"type": verification_type, "reason": e.reason},
            occurred_at=now,
        )
        raise

    ShareholderRepository.increment_login_count(shareholder.shareholder_code)

    if verification_type == VERIFICATION_PHONE:
        session_fields = {
            "action_type": ACTION_VERIFY,
            "verification_type": VERIFICATION_PHONE,
            "phone_number_used": phone_number,
            "phone_verification_time": now,
        }
        details = {"type": VERIFICATION_PHONE, "phoneNumber": phone_number}
    else:
        session_fields = {
            "action_type": ACTION_VERIFY,
            "verification_type": VERIFICATION_ID,
            "action_time": now,
        }
        details = {"type": VERIFICATION_ID}

    session_id = record_transition(
        EVENT_VERIFIED, shareholder, log_id=log_id, details=details, create=True, occurred_at=now, **session_fields
    )

    verifications_total.labels(type=verification_type, outcome="success").inc()
    logger.info(f"Shareholder {shareholder.shareholder_code} verified by {verification_type}")

    return {"verified": True, "profile": shareholder.to_profile(), "sessionId": session_id}
