# Overview: Service-layer operations for maintenance; encapsulates business logic and database work.

from __future__ import annotations

from dataclasses import dataclass, field

from ..extensions import db
from ..models import Document
from rentdesk.config import Settings
from rentdesk.services import storage_service


@dataclass(frozen=True)
class MissingBlob:
    document_id: int
    entity_type: str
    entity_id: int
    file_path: str


@dataclass
class ReconcileReport:
    missing_blobs: list[MissingBlob] = field(default_factory=list)
    orphan_blobs: list[str] = field(default_factory=list)
    removed_rows: int = 0
    removed_blobs: int = 0


def reconcile_documents(settings: Settings, *, fix: bool = False) -> ReconcileReport:
    """
    Compare document rows against blobs on disk.

    - missing_blobs: rows whose file is gone (left behind by an interrupted
      delete or removed out of band)
    - orphan_blobs: files under the upload folder no row points at

    With fix=True both sets are deleted.
    """
    report = ReconcileReport()
    documents = db.session.query(Document).order_by(Document.id.asc()).all()
    known_paths = {storage_service.resolve_path(settings.upload_folder, d.file_path) for d in documents}

    stale = []
    for document in documents:
        if not storage_service.blob_exists(settings.upload_folder, document.file_path):
            stale.append(document)
            report.missing_blobs.append(MissingBlob(
                document_id=document.id,
                entity_type=document.entity_type,
                entity_id=document.entity_id,
                file_path=document.file_path,
            ))

    for relative_path in storage_service.iter_blobs(settings.upload_folder):
        if storage_service.resolve_path(settings.upload_folder, relative_path) not in known_paths:
            report.orphan_blobs.append(relative_path)

    if fix:
        for document in stale:
            db.session.delete(document)
        db.session.commit()
        report.removed_rows = len(stale)

        for relative_path in report.orphan_blobs:
            if storage_service.remove_blob(settings.upload_folder, relative_path):
                report.removed_blobs += 1

    return report
