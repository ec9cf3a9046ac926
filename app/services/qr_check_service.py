"""
Service layer for QR code scans
"""
import logging

from constants import ACTION_VISIT, EVENT_VISIT, VERIFICATION_ID, VERIFICATION_PHONE
from exceptions import QrCodeInvalidException
from repositories.shareholder_repository import ShareholderRepository
from services.audit_service import record_transition
from services.validation import validate_identifier
from utils import now_utc

logger = logging.getLogger("main")


def check_qr(identifier):
    """
    Resolve a scanned identifier and open a verification session.

    The session defaults to phone verification when the shareholder has an
    effective mobile number, otherwise to ID verification. Opening it is a
    best-effort write, so sessionId may be None.
    """
    identifier = validate_identifier(identifier)

    shareholder = ShareholderRepository.get_by_uuid(identifier)
    if shareholder is None:
        raise QrCodeInvalidException()

    phone_number = shareholder.effective_mobile_phone
    verification_type = VERIFICATION_PHONE if shareholder.has_mobile_phone else VERIFICATION_ID

    now = now_utc()
    session_id = record_transition(
        EVENT_VISIT,
        shareholder,
        details={"verificationType": verification_type},
        create=True,
        occurred_at=now,
        action_type=ACTION_VISIT,
        verification_type=verification_type,
        action_time=now,
        has_updated_data=False,
    )
    logger.info(f"QR code scanned for shareholder {shareholder.shareholder_code}, session {session_id}")

    return {
        "profile": shareholder.to_profile(),
        "hasPhoneNumber": phone_number is not None,
        "phoneNumber": phone_number,
        "sessionId": session_id,
    }
