"""
Repository for VerificationEvent database operations

Append-only: no update or delete.
"""

from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.verification_event import VerificationEvent
from utils import now_utc


class VerificationEventRepository:
    """Repository for VerificationEvent database operations"""

    @staticmethod
    def append(
        event_type, log_id=None, shareholder_code=None, shareholder_uuid=None, details=None, occurred_at=None, commit=True
    ):
        """Append one immutable event; commit=False leaves it in the caller's transaction"""
        try:
            item = VerificationEvent(
                event_type=event_type,
                log_id=log_id,
                shareholder_code=shareholder_code,
                shareholder_uuid=shareholder_uuid,
                details=details or {},
                occurred_at=occurred_at or now_utc(),
            )
            db.session.add(item)
            if commit:
                db.session.commit()
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def list_for_session(log_id):
        """Events of one session in the order they happened"""
        return (
            VerificationEvent.query.filter_by(log_id=log_id)
            .order_by(VerificationEvent.occurred_at.asc(), VerificationEvent.id.asc())
            .all()
        )

    @staticmethod
    def count():
        """Count total VerificationEvent records"""
        return VerificationEvent.query.count()
