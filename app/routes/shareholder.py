"""
Shareholder Routes - QR check, verification and contact-detail endpoints
"""

from flask import Blueprint, current_app, request

from api_responses import success_response, paginated_response, get_json_body
from constants import CONTACT_FIELDS
from services.qr_check_service import check_qr
from services.verification_code_service import issue_code
from services.verification_service import verify
from services.contact_service import get_profile, list_profiles, update_contact, get_session_audit

shareholder_bp = Blueprint("shareholder", __name__, url_prefix="/api/shareholder")


@shareholder_bp.route("/qr-check/<identifier>", methods=["GET"])
def qr_check(identifier):
    """Resolve a scanned QR identifier and open a session"""
    return success_response(check_qr(identifier))


@shareholder_bp.route("/send-verification-code", methods=["POST"])
def send_verification_code():
    data = get_json_body(request)
    result = issue_code(
        data.get("identifier"),
        data.get("phoneNumber"),
        data.get("sessionId"),
        settings=current_app.extensions["portal_settings"],
        cooldown=current_app.extensions["cooldown_cache"],
        transport=current_app.extensions["sms_transport"],
    )
    return success_response(result, message=result["message"])


@shareholder_bp.route("/verify", methods=["POST"])
def verify_shareholder():
    data = get_json_body(request)
    result = verify(
        data.get("identifier"),
        data.get("type"),
        data.get("secret"),
        phone_number=data.get("phoneNumber"),
        log_id=data.get("sessionId"),
    )
    return success_response(result)


@shareholder_bp.route("/data/<shareholder_code>", methods=["GET"])
def get_shareholder_data(shareholder_code):
    return success_response(get_profile(shareholder_code))


@shareholder_bp.route("/data/<shareholder_code>", methods=["PUT"])
def update_shareholder_data(shareholder_code):
    """Apply contact changes; a key sent as null counts as submitted"""
    data = get_json_body(request)
    fields = {key: data[key] for key in CONTACT_FIELDS if key in data}
    profile = update_contact(shareholder_code, fields, log_id=data.get("sessionId"))
    return success_response(profile)


@shareholder_bp.route("/list", methods=["GET"])
def list_shareholders():
    items, total, page, per_page = list_profiles(
        request.args.get("page", 1), request.args.get("per_page", 20)
    )
    return paginated_response(items, total, page, per_page)


@shareholder_bp.route("/sessions/<log_id>", methods=["GET"])
def get_session(log_id):
    """Audit view of one verification session"""
    return success_response(get_session_audit(log_id))
