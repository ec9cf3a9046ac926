"""
Repository for VerificationSession database operations
"""

from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.verification_session import VerificationSession
from constants import VERIFICATION_PHONE


class VerificationSessionRepository:
    """Repository for VerificationSession database operations"""

    @staticmethod
    def get(log_id):
        """Get VerificationSession by LOG_ID"""
        return db.session.get(VerificationSession, log_id)

    @staticmethod
    def create(commit=True, **kwargs):
        """Create new VerificationSession record"""
        try:
            item = VerificationSession(**kwargs)
            db.session.add(item)
            if commit:
                db.session.commit()
                db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update_scoped(log_id, shareholder_code, commit=True, **fields):
        """
        Update a session row only if it belongs to the given shareholder.

        Returns:
            Number of rows updated (0 when the log id is unknown or foreign)
        """
        if not fields:
            return 0
        try:
            count = VerificationSession.query.filter_by(
                log_id=log_id, shareholder_code=shareholder_code
            ).update(fields, synchronize_session=False)
            if commit:
                db.session.commit()
            return count
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def latest_issued_code(shareholder_uuid, phone_number):
        """Most recent phone session carrying a code for this shareholder and phone"""
        return (
            VerificationSession.query.filter(
                VerificationSession.shareholder_uuid == shareholder_uuid,
                VerificationSession.phone_number_used == phone_number,
                VerificationSession.verification_type == VERIFICATION_PHONE,
                VerificationSession.random_code.isnot(None),
            )
            .order_by(VerificationSession.action_time.desc())
            .first()
        )

    @staticmethod
    def count():
        """Count total VerificationSession records"""
        return VerificationSession.query.count()
