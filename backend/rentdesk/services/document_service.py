# Overview: Service-layer operations for documents; encapsulates business logic and database work.

"""
Document store: metadata rows bound to (entity_type, entity_id) plus blobs on
disk.

Every lookup filters on the full (entity_type, entity_id, document_id)
triple. A document id that exists under a different entity is reported as
not found.

Delete stages the row removal, removes the blob, then commits. If the blob
cannot be removed the row survives (rollback). If the commit fails after the
blob is gone, the row is left pointing at a missing file: downloads answer
404 and `flask documents reconcile --fix` removes it.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from werkzeug.datastructures import FileStorage

from ..extensions import db
from ..models import Document, EntityType
from rentdesk.config import Settings
from rentdesk.errors import InternalError, NotFoundError, ValidationError
from rentdesk.services import storage_service
from rentdesk.time_utils import utcnow


@dataclass(frozen=True)
class DownloadTarget:
    document: Document
    path: str


def parse_entity_type(entity_type: str) -> EntityType:
    """Case-insensitive lookup; ValidationError for anything outside the set."""
    try:
        return EntityType((entity_type or "").strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid entity type. Must be one of: {', '.join(EntityType.values())}"
        )


def _scoped_query(entity_type: EntityType, entity_id: int):
    return db.session.query(Document).filter(
        Document.entity_type == entity_type.value,
        Document.entity_id == entity_id,
    )


def _validate_files(files: list[FileStorage], settings: Settings) -> list[FileStorage]:
    files = [f for f in files if f is not None and f.filename]
    if not files:
        raise ValidationError("No files were uploaded")
    if len(files) > settings.max_upload_files:
        raise ValidationError(f"Too many files. Maximum is {settings.max_upload_files} per upload")

    if settings.allowed_extensions:
        for f in files:
            ext = storage_service.file_extension(f.filename)
            if ext not in settings.allowed_extensions:
                raise ValidationError(
                    f"File type not allowed: {f.filename}. "
                    f"Allowed: {', '.join(sorted(settings.allowed_extensions))}"
                )
    return files


def upload_documents(
    entity_type: str,
    entity_id: int,
    files: list[FileStorage],
    uploaded_by: int,
    settings: Settings,
    *,
    description: str | None = None,
    tags: str | None = None,
) -> list[Document]:
    """
    Store each file and create one metadata row per file.

    All files are validated before any blob is written. Rows are committed
    together; on failure, blobs written by this call are removed again.
    """
    etype = parse_entity_type(entity_type)
    files = _validate_files(files, settings)

    description = (description or "").strip() or None
    tags = (tags or "").strip() or None
    if tags and len(tags) > 255:
        raise ValidationError("tags exceeds max length 255")

    stored: list[storage_service.StoredBlob] = []
    documents: list[Document] = []
    now = utcnow()
    try:
        for f in files:
            blob = storage_service.save_blob(settings.upload_folder, etype.value, f)
            stored.append(blob)
            document = Document(
                file_name=blob.file_name,
                original_name=blob.original_name[:255],
                file_path=blob.relative_path,
                file_size=blob.size,
                mime_type=blob.mime_type,
                entity_type=etype.value,
                entity_id=entity_id,
                description=description,
                tags=tags,
                uploaded_by=uploaded_by,
                uploaded_at=now,
            )
            db.session.add(document)
            documents.append(document)
        db.session.commit()
    except Exception:
        db.session.rollback()
        for blob in stored:
            try:
                storage_service.remove_blob(settings.upload_folder, blob.relative_path)
            except OSError:
                current_app.logger.exception("Failed to remove blob %s after aborted upload", blob.relative_path)
        raise

    current_app.logger.info(
        "Uploaded %d document(s) to %s/%s by user %s",
        len(documents), etype.value, entity_id, uploaded_by,
    )
    return documents


def list_documents(entity_type: str, entity_id: int) -> list[Document]:
    etype = parse_entity_type(entity_type)
    return _scoped_query(etype, entity_id).order_by(
        Document.uploaded_at.desc(),
        Document.id.desc(),
    ).all()


def get_document(entity_type: str, entity_id: int, document_id: int) -> Document | None:
    etype = parse_entity_type(entity_type)
    return _scoped_query(etype, entity_id).filter(Document.id == document_id).first()


def require_document(entity_type: str, entity_id: int, document_id: int) -> Document:
    document = get_document(entity_type, entity_id, document_id)
    if not document:
        raise NotFoundError("Document not found")
    return document


def get_download(entity_type: str, entity_id: int, document_id: int, settings: Settings) -> DownloadTarget:
    """
    Resolve the document and its blob path.

    Raises NotFoundError when the row is missing or the row exists but the
    blob is gone.
    """
    document = require_document(entity_type, entity_id, document_id)
    if not storage_service.blob_exists(settings.upload_folder, document.file_path):
        current_app.logger.warning(
            "Document %s (%s/%s) has no blob at %s",
            document.id, document.entity_type, document.entity_id, document.file_path,
        )
        raise NotFoundError("File not found on disk")
    return DownloadTarget(
        document=document,
        path=storage_service.resolve_path(settings.upload_folder, document.file_path),
    )


def delete_document(entity_type: str, entity_id: int, document_id: int, settings: Settings) -> None:
    document = require_document(entity_type, entity_id, document_id)
    relative_path = document.file_path

    db.session.delete(document)
    db.session.flush()

    try:
        removed = storage_service.remove_blob(settings.upload_folder, relative_path)
    except OSError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to remove blob %s", relative_path)
        raise InternalError("Failed to delete document file") from exc

    if not removed:
        current_app.logger.warning("Blob %s was already missing; deleting metadata only", relative_path)

    db.session.commit()
    current_app.logger.info("Deleted document %s from %s/%s", document_id, entity_type, entity_id)
