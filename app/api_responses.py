"""
API Response Utilities - Standardized success envelopes
Errors are rendered by the handlers in exceptions.py
"""

from flask import jsonify
import logging

logger = logging.getLogger(__name__)


def success_response(data=None, message=None, status_code=200):
    """
    Standard success response format for API endpoints
    """
    response = {"success": True, "data": data}

    if message:
        response["message"] = message

    return jsonify(response), status_code


def paginated_response(items, total, page, per_page):
    """
    Standard paginated response format for list endpoints
    """
    response = {
        "success": True,
        "data": items,
        "pagination": {
            "total": total,
            "page": page,
            "per_page": per_page,
            "total_pages": (total + per_page - 1) // per_page,
        },
    }

    response["pagination"]["has_more"] = page * per_page < total

    response["pagination"]["next_page"] = page + 1 if response["pagination"]["has_more"] else None
    response["pagination"]["prev_page"] = page - 1 if page > 1 else None

    return jsonify(response), 200


def get_json_body(request):
    """Request body as a dict; a missing or non-object body is treated as empty."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        logger.debug("Request body missing or not a JSON object")
        return {}
    return data
