"""
Repository for Shareholder database operations
"""

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.shareholder import Shareholder
from utils import now_utc


class ShareholderRepository:
    """Repository for Shareholder database operations"""

    @staticmethod
    def get_by_uuid(uuid):
        """Get Shareholder by QR code UUID, ignoring case"""
        return Shareholder.query.filter(func.lower(Shareholder.uuid) == uuid.lower()).first()

    @staticmethod
    def get_by_code(shareholder_code):
        """Get Shareholder by 6-digit shareholder code"""
        return db.session.get(Shareholder, shareholder_code)

    @staticmethod
    def find_codes_by_id_last_four(id_last_four):
        """Codes of every shareholder whose stored ID suffix matches"""
        rows = (
            db.session.query(Shareholder.shareholder_code)
            .filter(Shareholder.id_last_four == id_last_four)
            .all()
        )
        return {row[0] for row in rows}

    @staticmethod
    def list_paged(page, per_page):
        """Shareholders ordered by code, with the total count"""
        query = Shareholder.query.order_by(Shareholder.shareholder_code.asc())
        total = query.count()
        items = query.offset((page - 1) * per_page).limit(per_page).all()
        return items, total

    @staticmethod
    def create(**kwargs):
        """Create new Shareholder record"""
        try:
            if kwargs.get("uuid"):
                kwargs["uuid"] = kwargs["uuid"].lower()
            item = Shareholder(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def increment_login_count(shareholder_code):
        """LOGIN_COUNT + 1 as a single UPDATE so concurrent verifications both count"""
        try:
            Shareholder.query.filter_by(shareholder_code=shareholder_code).update(
                {
                    Shareholder.login_count: Shareholder.login_count + 1,
                    Shareholder.updated_at: now_utc(),
                },
                synchronize_session=False,
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def apply_contact_update(shareholder_code, changes):
        """
        Write the changed UPDATED_* columns and count the attempt.

        Args:
            shareholder_code: Shareholder to update
            changes: {field: value} for 'address', 'home_phone', 'mobile_phone';
                     may be empty, UPDATE_COUNT still increments

        Returns:
            Number of rows updated
        """
        values = {getattr(Shareholder, f"updated_{field}"): value for field, value in changes.items()}
        values[Shareholder.update_count] = Shareholder.update_count + 1
        values[Shareholder.updated_at] = now_utc()
        try:
            count = Shareholder.query.filter_by(shareholder_code=shareholder_code).update(
                values, synchronize_session=False
            )
            db.session.commit()
            return count
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def count():
        """Count total Shareholder records"""
        return Shareholder.query.count()
