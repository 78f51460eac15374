# Overview: Flask API routes for entity documents; parses input and returns JSON responses.

"""
Entity document routes

All routes are scoped by /api/<entity_type>/<entity_id>/documents and
require a bearer token. entity_type is one of shop, apartment, booking,
waterbill, currentbill, expense (case-insensitive).
"""

from flask import Blueprint, request, jsonify, g, current_app, send_file

from ..config import get_settings
from ..errors import ApiError
from ..services import document_service
from ..decorators import require_auth


documents_bp = Blueprint("documents", __name__, url_prefix="/api")

UPLOAD_FIELD = "documents"


@documents_bp.get("/<entity_type>/<int:entity_id>/documents")
@require_auth
def list_documents_route(entity_type: str, entity_id: int):
    try:
        documents = document_service.list_documents(entity_type, entity_id)
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list documents")
        return jsonify({"error": "Failed to retrieve documents"}), 500

    return jsonify({
        "count": len(documents),
        "items": [d.to_dict() for d in documents],
    }), 200


@documents_bp.post("/<entity_type>/<int:entity_id>/documents")
@require_auth
def upload_documents_route(entity_type: str, entity_id: int):
    """
    Multipart upload, files in the "documents" field.

    Optional form fields: description, tags (comma-separated).
    """
    try:
        documents = document_service.upload_documents(
            entity_type,
            entity_id,
            request.files.getlist(UPLOAD_FIELD),
            g.current_user.id,
            get_settings(),
            description=request.form.get("description"),
            tags=request.form.get("tags"),
        )
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to upload documents")
        return jsonify({"error": "Failed to upload documents"}), 500

    return jsonify({
        "message": f"{len(documents)} document(s) uploaded successfully",
        "count": len(documents),
        "items": [d.to_dict() for d in documents],
    }), 201


@documents_bp.get("/<entity_type>/<int:entity_id>/documents/<int:document_id>")
@require_auth
def get_document_route(entity_type: str, entity_id: int, document_id: int):
    try:
        document = document_service.require_document(entity_type, entity_id, document_id)
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to retrieve document")
        return jsonify({"error": "Failed to retrieve document"}), 500

    return jsonify({"document": document.to_dict()}), 200


@documents_bp.get("/<entity_type>/<int:entity_id>/documents/<int:document_id>/download")
@require_auth
def download_document_route(entity_type: str, entity_id: int, document_id: int):
    try:
        target = document_service.get_download(entity_type, entity_id, document_id, get_settings())
        return send_file(
            target.path,
            mimetype=target.document.mime_type,
            as_attachment=True,
            download_name=target.document.original_name,
        )
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to download document")
        return jsonify({"error": "Failed to download document"}), 500


@documents_bp.delete("/<entity_type>/<int:entity_id>/documents/<int:document_id>")
@require_auth
def delete_document_route(entity_type: str, entity_id: int, document_id: int):
    try:
        document_service.delete_document(entity_type, entity_id, document_id, get_settings())
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete document")
        return jsonify({"error": "Failed to delete document"}), 500

    return jsonify({"message": "Document deleted successfully"}), 200
