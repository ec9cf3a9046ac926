"""Verification event model.

Append-only: rows are inserted by VerificationEventRepository.append and
never updated or deleted.
"""

from db import db
from utils import now_utc, isoformat_utc


class VerificationEvent(db.Model):
    __tablename__ = "verification_event"

    id = db.Column(db.Integer, primary_key=True)
    log_id = db.Column(db.String(36), index=True)
    shareholder_code = db.Column(db.String(6), index=True)
    shareholder_uuid = db.Column(db.String(36))
    event_type = db.Column(db.String(30), nullable=False, index=True)
    occurred_at = db.Column(db.DateTime, default=now_utc, index=True)
    details = db.Column(db.JSON)

    __table_args__ = (db.Index("idx_event_log_time", "log_id", "occurred_at"),)

    def to_dict(self):
        return {
            "id": self.id,
            "logId": self.log_id,
            "shareholderCode": self.shareholder_code,
            "eventType": self.event_type,
            "occurredAt": isoformat_utc(self.occurred_at),
            "details": self.details or {},
        }
