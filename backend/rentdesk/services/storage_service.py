# Overview: Filesystem side-store for document blobs.

"""
Blobs are written under <upload_folder>/<entity_type>/ with a generated name
(<utc timestamp>_<12 hex chars>.<ext>) unrelated to the client filename.
Documents store the path relative to the upload folder; resolve_path turns it
back into an absolute path and refuses anything that escapes the folder.
"""

from __future__ import annotations

import mimetypes
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from rentdesk.errors import NotFoundError

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredBlob:
    file_name: str
    relative_path: str
    size: int
    mime_type: str
    original_name: str


def file_extension(filename: str | None) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def generate_file_name(original_name: str) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    extension = secure_filename(file_extension(original_name))
    unique = f"{timestamp}_{uuid.uuid4().hex[:12]}"
    return f"{unique}.{extension}" if extension else unique


def guess_mime_type(file: FileStorage) -> str:
    mime_type = file.mimetype
    if mime_type and mime_type != DEFAULT_MIME_TYPE:
        return mime_type
    guessed, _ = mimetypes.guess_type(file.filename or "")
    return guessed or mime_type or DEFAULT_MIME_TYPE


def resolve_path(upload_folder: str, relative_path: str) -> str:
    root = os.path.realpath(upload_folder)
    path = os.path.realpath(os.path.join(root, relative_path))
    if os.path.commonpath([root, path]) != root:
        raise NotFoundError("File not found on disk")
    return path


def save_blob(upload_folder: str, subfolder: str, file: FileStorage) -> StoredBlob:
    """Write one uploaded part to disk under a generated name."""
    original_name = os.path.basename(file.filename or "") or "upload"
    file_name = generate_file_name(original_name)
    relative_path = os.path.join(subfolder, file_name)
    path = resolve_path(upload_folder, relative_path)

    os.makedirs(os.path.dirname(path), exist_ok=True)
    file.save(path)

    return StoredBlob(
        file_name=file_name,
        relative_path=relative_path,
        size=os.path.getsize(path),
        mime_type=guess_mime_type(file),
        original_name=original_name,
    )


def blob_exists(upload_folder: str, relative_path: str) -> bool:
    try:
        return os.path.isfile(resolve_path(upload_folder, relative_path))
    except NotFoundError:
        return False


def remove_blob(upload_folder: str, relative_path: str) -> bool:
    """
    Delete a blob. Returns False if it was already gone.

    Other OSErrors propagate.
    """
    path = resolve_path(upload_folder, relative_path)
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    return True


def iter_blobs(upload_folder: str):
    """Yield relative paths of every blob under the upload folder."""
    root = os.path.realpath(upload_folder)
    if not os.path.isdir(root):
        return
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            yield os.path.relpath(os.path.join(dirpath, name), root)
