"""
Model: Shareholder

Rows are created by the onboarding import; the portal only bumps the
counters and writes the UPDATED_* overrides.
"""

from db import db, now_utc
from utils import effective_value, isoformat_utc


class Shareholder(db.Model):
    __tablename__ = "shareholder"

    shareholder_code = db.Column("SHAREHOLDER_CODE", db.String(6), primary_key=True)
    uuid = db.Column("UUID", db.String(36), unique=True, nullable=False, index=True)
    name = db.Column("NAME", db.String(100))
    id_last_four = db.Column("ID_LAST_FOUR", db.String(4), index=True)

    original_address = db.Column("ORIGINAL_ADDRESS", db.String(200))
    updated_address = db.Column("UPDATED_ADDRESS", db.String(200))
    original_home_phone = db.Column("ORIGINAL_HOME_PHONE", db.String(20))
    updated_home_phone = db.Column("UPDATED_HOME_PHONE", db.String(20))
    original_mobile_phone = db.Column("ORIGINAL_MOBILE_PHONE", db.String(20))
    updated_mobile_phone = db.Column("UPDATED_MOBILE_PHONE", db.String(20))

    login_count = db.Column("LOGIN_COUNT", db.Integer, nullable=False, default=0)
    update_count = db.Column("UPDATE_COUNT", db.Integer, nullable=False, default=0)

    created_at = db.Column("CREATED_AT", db.DateTime, default=now_utc)
    updated_at = db.Column("UPDATED_AT", db.DateTime, default=now_utc)

    def effective(self, field):
        """Effective value of a contact field ('address', 'home_phone', 'mobile_phone')"""
        return effective_value(getattr(self, f"updated_{field}"), getattr(self, f"original_{field}"))

    @property
    def effective_address(self):
        return self.effective("address")

    @property
    def effective_home_phone(self):
        return self.effective("home_phone")

    @property
    def effective_mobile_phone(self):
        return self.effective("mobile_phone")

    @property
    def has_mobile_phone(self):
        return self.effective_mobile_phone is not None

    def to_profile(self):
        """Public profile; the ID suffix is never exposed."""
        return {
            "shareholderCode": self.shareholder_code,
            "uuid": self.uuid,
            "name": self.name,
            "originalAddress": self.original_address or None,
            "originalHomePhone": self.original_home_phone or None,
            "originalMobilePhone": self.original_mobile_phone or None,
            "updatedAddress": self.updated_address or None,
            "updatedHomePhone": self.updated_home_phone or None,
            "updatedMobilePhone": self.updated_mobile_phone or None,
            "address": self.effective_address,
            "homePhone": self.effective_home_phone,
            "mobilePhone": self.effective_mobile_phone,
            "loginCount": self.login_count or 0,
            "updateCount": self.update_count or 0,
            "createdAt": isoformat_utc(self.created_at),
            "updatedAt": isoformat_utc(self.updated_at),
        }
