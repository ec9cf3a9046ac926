"""
Service layer for issuing phone verification codes
"""
import logging
import secrets
from datetime import timedelta

from constants import CODE_MIN, CODE_MAX, CODE_TTL_SECONDS, EVENT_CODE_ISSUED, VERIFICATION_PHONE
from exceptions import (
    AuthenticationException,
    CooldownActiveException,
    DeliveryException,
    MissingFieldException,
    QrCodeInvalidException,
)
from metrics import codes_issued_total
from repositories.shareholder_repository import ShareholderRepository
from services.audit_service import record_transition
from services.validation import validate_identifier
from settings import is_test_mode, resend_cooldown_seconds
from sms import SmsDeliveryError
from utils import now_utc, isoformat_utc, mask_phone

logger = logging.getLogger("main")


def generate_code():
    """Uniform 4-digit code in [CODE_MIN, CODE_MAX]"""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def issue_code(identifier, phone_number, log_id=None, *, settings, cooldown, transport):
    """
    Issue a code for the shareholder's registered mobile number.

    The code is dispatched first; persisting it onto the session is a
    best-effort audit write. A failed dispatch releases the cooldown slot
    and surfaces as a 500.

    Returns:
        {expiresAt, message, sessionId[, code]}, code only in test mode
    """
    identifier = validate_identifier(identifier)
    if phone_number is None or not str(phone_number).strip():
        raise MissingFieldException("Phone number is required")

    shareholder = ShareholderRepository.get_by_uuid(identifier)
    if shareholder is None:
        raise QrCodeInvalidException()

    # Exact match against the effective number, no normalization
    if phone_number != shareholder.effective_mobile_phone:
        raise AuthenticationException(reason="phone_mismatch")

    test_mode = is_test_mode(settings)
    slot = (identifier, phone_number)
    retry_after = cooldown.acquire(slot, resend_cooldown_seconds(settings))
    if retry_after:
        raise CooldownActiveException(retry_after)

    code = generate_code()
    issued_at = now_utc()
    expires_at = issued_at + timedelta(seconds=CODE_TTL_SECONDS)

    if test_mode:
        logger.info(f"Test mode: SMS dispatch skipped for {mask_phone(phone_number)}")
    else:
        sms = settings["sms"]
        try:
            transport.send(sms["message_template"].format(code=code), phone_number, subject=sms.get("subject"))
        except SmsDeliveryError as e:
            cooldown.release(slot)
            raise DeliveryException() from e

    session_id = record_transition(
        EVENT_CODE_ISSUED,
        shareholder,
        log_id=log_id,
        details={"phoneNumber": phone_number, "expiresAt": isoformat_utc(expires_at)},
        create=True,
        occurred_at=issued_at,
        verification_type=VERIFICATION_PHONE,
        phone_number_used=phone_number,
        random_code=code,
        action_time=issued_at,
    )

    codes_issued_total.labels(mode="test" if test_mode else "sms").inc()
    logger.info(f"Verification code issued for shareholder {shareholder.shareholder_code}")

    result = {
        "expiresAt": isoformat_utc(expires_at),
        "message": "Verification code sent",
        "sessionId": session_id,
    }
    if test_mode:
        result["code"] = code
    return result
