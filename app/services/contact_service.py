"""
Service layer for shareholder contact details

Reads profiles and applies contact updates. An update only writes the
fields whose submitted value differs from the current effective value,
but always counts the attempt.
"""
import logging

from constants import CONTACT_FIELDS, EVENT_CONTACT_UPDATED
from exceptions import MissingFieldException, ShareholderNotFoundException, SessionNotFoundException
from metrics import contact_updates_total
from repositories.shareholder_repository import ShareholderRepository
from repositories.verification_event_repository import VerificationEventRepository
from repositories.verification_session_repository import VerificationSessionRepository
from services.audit_service import record_transition, fold_session_events
from services.validation import CONTACT_VALIDATORS, validate_shareholder_code, validate_page_args

logger = logging.getLogger("main")


def _get_shareholder(shareholder_code):
    shareholder = ShareholderRepository.get_by_code(validate_shareholder_code(shareholder_code))
    if shareholder is None:
        raise ShareholderNotFoundException()
    return shareholder


def get_profile(shareholder_code):
    return _get_shareholder(shareholder_code).to_profile()


def list_profiles(page=1, per_page=20):
    page, per_page = validate_page_args(page, per_page)
    items, total = ShareholderRepository.list_paged(page, per_page)
    return [s.to_profile() for s in items], total, page, per_page


def compute_changes(shareholder, submitted):
    """
    Diff validated submissions against the effective values.

    Args:
        shareholder: Current Shareholder row
        submitted: {field: normalized value}, None meaning absent

    Returns:
        {field: value} for the fields that materially change
    """
    return {
        field: value
        for field, value in submitted.items()
        if value != shareholder.effective(field)
    }


def update_contact(shareholder_code, fields, log_id=None):
    """
    Apply a contact update.

    Args:
        shareholder_code: 6-digit shareholder code
        fields: {payload key: raw value} for the keys present in the
                request ('address', 'homePhone', 'mobilePhone')
        log_id: Session to mark with the change, if any

    Returns:
        Refreshed profile
    """
    if not fields:
        raise MissingFieldException("At least one field to update is required")
    shareholder = _get_shareholder(shareholder_code)

    # Validate the whole set before anything is written
    submitted = {}
    for key, raw in fields.items():
        field = CONTACT_FIELDS[key]
        submitted[field] = CONTACT_VALIDATORS[field](raw)

    changes = compute_changes(shareholder, submitted)
    ShareholderRepository.apply_contact_update(shareholder.shareholder_code, changes)

    session_fields = {}
    if changes:
        session_fields["has_updated_data"] = True
        session_fields.update({f"updated_{field}": value for field, value in changes.items()})

    record_transition(
        EVENT_CONTACT_UPDATED,
        shareholder,
        log_id=log_id,
        details={"fields": sorted(submitted), "changes": changes},
        **session_fields,
    )

    contact_updates_total.labels(changed="true" if changes else "false").inc()
    logger.info(
        f"Contact update for shareholder {shareholder.shareholder_code}: "
        f"changed={sorted(changes) or 'none'}"
    )

    return ShareholderRepository.get_by_code(shareholder.shareholder_code).to_profile()


def get_session_audit(log_id):
    """Session row, its event stream and the projection folded from it"""
    session = VerificationSessionRepository.get(log_id)
    if session is None:
        raise SessionNotFoundException()
    events = VerificationEventRepository.list_for_session(log_id)
    return {
        "session": session.to_dict(),
        "events": [e.to_dict() for e in events],
        "projection": fold_session_events(events),
    }
