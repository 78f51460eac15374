from __future__ import annotations

import enum

from ..extensions import db
from rentdesk.time_utils import to_utc_z, utcnow


class EntityType(str, enum.Enum):
    """Business entities a document can be attached to."""
    SHOP = "shop"
    APARTMENT = "apartment"
    BOOKING = "booking"
    WATERBILL = "waterbill"
    CURRENTBILL = "currentbill"
    EXPENSE = "expense"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class Document(db.Model):
    """
    Metadata for an uploaded file blob.

    A document belongs to exactly one (entity_type, entity_id) pair. Lookups
    always filter on both fields together with the document id, so a row is
    never reachable through another entity even if the id matches.

    The blob lives under the upload folder at `file_path` (relative), stored
    as `file_name`; `original_name` is what the client uploaded.
    """
    __tablename__ = "documents"
    __table_args__ = (
        db.Index("ix_documents_entity", "entity_type", "entity_id"),
        db.Index("ix_documents_uploaded_by", "uploaded_by"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    file_name = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(512), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    mime_type = db.Column(db.String(255), nullable=False)

    entity_type = db.Column(db.String(32), nullable=False)
    entity_id = db.Column(db.Integer, nullable=False)

    description = db.Column(db.Text, nullable=True)
    # Comma-separated
    tags = db.Column(db.String(255), nullable=True)

    uploaded_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    uploaded_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    uploader = db.relationship("User", backref=db.backref("documents", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "file_name": self.file_name,
            "original_name": self.original_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "tags": self.tags,
            "uploaded_by": self.uploaded_by,
            "uploaded_at": to_utc_z(self.uploaded_at),
        }
