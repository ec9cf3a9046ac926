"""
Model: VerificationSession

One row per scan, mutated in place across visit -> code issued -> verified.
It is the current-state projection of the verification_event stream.
"""

from db import db, now_utc
from utils import isoformat_utc


class VerificationSession(db.Model):
    __tablename__ = "verification_session"

    log_id = db.Column("LOG_ID", db.String(36), primary_key=True)
    shareholder_uuid = db.Column("SHAREHOLDER_UUID", db.String(36), index=True)
    shareholder_code = db.Column("SHAREHOLDER_CODE", db.String(6), index=True)
    action_type = db.Column("ACTION_TYPE", db.String(10), nullable=False)  # 'visit', 'verify'
    verification_type = db.Column("VERIFICATION_TYPE", db.String(10))  # 'phone', 'id'
    phone_number_used = db.Column("PHONE_NUMBER_USED", db.String(20))
    random_code = db.Column("RANDOM_CODE", db.String(4))
    action_time = db.Column("ACTION_TIME", db.DateTime, default=now_utc)
    phone_verification_time = db.Column("PHONE_VERIFICATION_TIME", db.DateTime)
    has_updated_data = db.Column("HAS_UPDATED_DATA", db.Boolean, nullable=False, default=False)

    # Values written by the contact update made within this session
    updated_address = db.Column("UPDATED_ADDRESS", db.String(200))
    updated_home_phone = db.Column("UPDATED_HOME_PHONE", db.String(20))
    updated_mobile_phone = db.Column("UPDATED_MOBILE_PHONE", db.String(20))

    __table_args__ = (
        # Latest issued code lookup: shareholder + phone, newest first
        db.Index("idx_session_uuid_phone_time", "SHAREHOLDER_UUID", "PHONE_NUMBER_USED", "ACTION_TIME"),
    )

    def to_dict(self):
        # RANDOM_CODE stays out of every serialized view
        return {
            "logId": self.log_id,
            "shareholderUuid": self.shareholder_uuid,
            "shareholderCode": self.shareholder_code,
            "actionType": self.action_type,
            "verificationType": self.verification_type,
            "phoneNumberUsed": self.phone_number_used,
            "codeIssued": self.random_code is not None,
            "actionTime": isoformat_utc(self.action_time),
            "phoneVerificationTime": isoformat_utc(self.phone_verification_time),
            "hasUpdatedData": bool(self.has_updated_data),
            "updatedAddress": self.updated_address,
            "updatedHomePhone": self.updated_home_phone,
            "updatedMobilePhone": self.updated_mobile_phone,
        }
