# Overview: Flask API routes for shops operations; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request, g, current_app

from ..decorators import require_auth
from ..errors import ApiError
from ..services import shop_service


shops_bp = Blueprint("shops", __name__, url_prefix="/api/shops")


@shops_bp.get("")
@require_auth
def list_shops():
    """
    Query params:
    - status: occupied | vacant | maintenance | reserved (optional)
    - q: matches shop number, name or tenant name (optional)
    """
    try:
        shops = shop_service.list_shops(
            status=request.args.get("status"),
            search=request.args.get("q"),
        )
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list shops")
        return jsonify({"error": "Failed to retrieve shops"}), 500
    return jsonify({"count": len(shops), "items": [shop.to_dict() for shop in shops]}), 200


@shops_bp.post("")
@require_auth
def create_shop():
    payload = request.get_json(silent=True)
    try:
        shop = shop_service.create_shop(payload, user_id=g.current_user.id)
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create shop")
        return jsonify({"error": "Failed to create shop"}), 500
    return jsonify({"shop": shop.to_dict()}), 201


@shops_bp.get("/<int:shop_id>")
@require_auth
def get_shop(shop_id: int):
    try:
        shop = shop_service.require_shop(shop_id)
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to retrieve shop")
        return jsonify({"error": "Failed to retrieve shop"}), 500
    return jsonify({"shop": shop.to_dict()}), 200


@shops_bp.put("/<int:shop_id>")
@require_auth
def update_shop(shop_id: int):
    payload = request.get_json(silent=True)
    try:
        shop = shop_service.update_shop(shop_id, payload, user_id=g.current_user.id)
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update shop")
        return jsonify({"error": "Failed to update shop"}), 500
    return jsonify({"shop": shop.to_dict()}), 200


@shops_bp.patch("/<int:shop_id>/status")
@require_auth
def set_shop_status(shop_id: int):
    data = request.get_json(silent=True) or {}
    try:
        shop = shop_service.set_shop_status(shop_id, data.get("status"), user_id=g.current_user.id)
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update shop status")
        return jsonify({"error": "Failed to update shop status"}), 500
    return jsonify({"shop": shop.to_dict()}), 200
