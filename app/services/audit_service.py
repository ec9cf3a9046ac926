"""
Audit trail for the verification flow.

Every transition is appended to the verification_event stream and
projected onto the matching verification_session row in one commit, so
the stream never holds an event its projection lacks. The write is
best-effort: a storage failure is rolled back, logged and counted, never
raised, so the outcome of the primary operation does not depend on it.
"""

import uuid

import structlog
from sqlalchemy.exc import SQLAlchemyError

from db import db
from constants import (
    ACTION_VISIT,
    ACTION_VERIFY,
    VERIFICATION_PHONE,
    VERIFICATION_ID,
    EVENT_VISIT,
    EVENT_CODE_ISSUED,
    EVENT_VERIFIED,
    EVENT_CONTACT_UPDATED,
)
from metrics import audit_write_failures_total
from repositories.verification_event_repository import VerificationEventRepository
from repositories.verification_session_repository import VerificationSessionRepository
from utils import now_utc, isoformat_utc, sanitize_sensitive_data

logger = structlog.get_logger("audit")


def _resolve_session(log_id, shareholder_code):
    """The log id if it names a session of this shareholder, else None."""
    if not log_id:
        return None
    session = VerificationSessionRepository.get(log_id)
    if session is None or session.shareholder_code != shareholder_code:
        logger.warning("Session not usable for shareholder", log_id=log_id, shareholder_code=shareholder_code)
        return None
    return log_id


def record_transition(event_type, shareholder, log_id=None, details=None, create=False, occurred_at=None, **fields):
    """
    Append an event and project it onto the session row.

    Args:
        event_type: One of the EVENT_* constants
        shareholder: Shareholder the event belongs to
        log_id: Session the caller is working in, may be None
        details: JSON payload stored with the event
        create: Insert a new session row when log_id does not name one
                of this shareholder's sessions
        occurred_at: Event time, shared with any timestamp column in fields
        **fields: Session columns to set

    Returns:
        The log id the event was recorded under, or None when no session
        applies or the audit write failed
    """
    occurred_at = occurred_at or now_utc()
    target = None
    try:
        target = _resolve_session(log_id, shareholder.shareholder_code)
        is_new = target is None and create
        if is_new:
            target = str(uuid.uuid4())

        VerificationEventRepository.append(
            event_type,
            log_id=target,
            shareholder_code=shareholder.shareholder_code,
            shareholder_uuid=shareholder.uuid,
            details=details,
            occurred_at=occurred_at,
            commit=False,
        )

        if is_new:
            values = {"action_type": ACTION_VISIT, "action_time": occurred_at, "has_updated_data": False}
            values.update(fields)
            VerificationSessionRepository.create(
                log_id=target,
                shareholder_uuid=shareholder.uuid,
                shareholder_code=shareholder.shareholder_code,
                commit=False,
                **values,
            )
        elif target and fields:
            VerificationSessionRepository.update_scoped(target, shareholder.shareholder_code, commit=False, **fields)
        db.session.commit()

        logger.info(
            "Audit event recorded",
            event_type=event_type,
            log_id=target,
            shareholder_code=shareholder.shareholder_code,
            details=sanitize_sensitive_data(details or {}),
        )
        return target
    except SQLAlchemyError as e:
        db.session.rollback()
        audit_write_failures_total.labels(event=event_type).inc()
        logger.error(
            "Audit write failed",
            event_type=event_type,
            log_id=target or log_id,
            shareholder_code=shareholder.shareholder_code,
            error=str(e),
        )
        return None


def _empty_projection():
    return {
        "logId": None,
        "shareholderUuid": None,
        "shareholderCode": None,
        "actionType": None,
        "verificationType": None,
        "phoneNumberUsed": None,
        "codeIssued": False,
        "actionTime": None,
        "phoneVerificationTime": None,
        "hasUpdatedData": False,
        "updatedAddress": None,
        "updatedHomePhone": None,
        "updatedMobilePhone": None,
    }


def fold_session_events(events):
    """
    Rebuild a session's current state from its event stream.

    Produces the same shape as VerificationSession.to_dict(). Events are
    applied in the order given; verification_failed leaves the state alone.
    """
    state = _empty_projection()

    for event in events:
        details = event.details or {}
        at = isoformat_utc(event.occurred_at)
        state["logId"] = state["logId"] or event.log_id
        state["shareholderCode"] = state["shareholderCode"] or event.shareholder_code
        state["shareholderUuid"] = state["shareholderUuid"] or event.shareholder_uuid
        if state["actionType"] is None:
            state["actionType"] = ACTION_VISIT
            state["actionTime"] = at

        if event.event_type == EVENT_VISIT:
            state["actionType"] = ACTION_VISIT
            state["verificationType"] = details.get("verificationType")
            state["actionTime"] = at
        elif event.event_type == EVENT_CODE_ISSUED:
            state["verificationType"] = VERIFICATION_PHONE
            state["phoneNumberUsed"] = details.get("phoneNumber")
            state["codeIssued"] = True
            state["actionTime"] = at
        elif event.event_type == EVENT_VERIFIED:
            state["actionType"] = ACTION_VERIFY
            if details.get("type") == VERIFICATION_PHONE:
                state["verificationType"] = VERIFICATION_PHONE
                state["phoneNumberUsed"] = details.get("phoneNumber", state["phoneNumberUsed"])
                state["phoneVerificationTime"] = at
            elif details.get("type") == VERIFICATION_ID:
                state["verificationType"] = VERIFICATION_ID
                state["actionTime"] = at
        elif event.event_type == EVENT_CONTACT_UPDATED:
            changes = details.get("changes") or {}
            if changes:
                state["hasUpdatedData"] = True
            if "address" in changes:
                state["updatedAddress"] = changes["address"]
            if "home_phone" in changes:
                state["updatedHomePhone"] = changes["home_phone"]
            if "mobile_phone" in changes:
                state["updatedMobilePhone"] = changes["mobile_phone"]

    return state
