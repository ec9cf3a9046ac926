"""
Shareholder Portal - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class ErrorCode:
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    SHAREHOLDER_NOT_FOUND = "SHAREHOLDER_NOT_FOUND"
    QR_CODE_INVALID = "QR_CODE_INVALID"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    COOLDOWN_ACTIVE = "COOLDOWN_ACTIVE"
    DATABASE_ERROR = "DATABASE_ERROR"
    SMS_DELIVERY_FAILED = "SMS_DELIVERY_FAILED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


DEFAULT_MESSAGES = {
    ErrorCode.MISSING_REQUIRED_FIELD: "Missing required field",
    ErrorCode.INVALID_FORMAT: "Invalid data format",
    ErrorCode.AUTHENTICATION_FAILED: "Identity verification failed. If this keeps happening, please contact the administrator",
    ErrorCode.SHAREHOLDER_NOT_FOUND: "Shareholder not found",
    ErrorCode.QR_CODE_INVALID: "QR code is invalid or has expired, please contact the administrator",
    ErrorCode.SESSION_NOT_FOUND: "Verification session not found",
    ErrorCode.COOLDOWN_ACTIVE: "Please wait before requesting another verification code",
    ErrorCode.DATABASE_ERROR: "Database error",
    ErrorCode.SMS_DELIVERY_FAILED: "Failed to send the verification SMS, please try again later",
    ErrorCode.INTERNAL_SERVER_ERROR: "Internal server error",
}


class PortalException(Exception):
    """Base exception for the portal"""
    status_code = 500

    def __init__(self, message: str = None, code: str = ErrorCode.INTERNAL_SERVER_ERROR):
        self.code = code
        self.message = message or DEFAULT_MESSAGES.get(code, DEFAULT_MESSAGES[ErrorCode.INTERNAL_SERVER_ERROR])
        super().__init__(self.message)

    def to_dict(self):
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
            }
        }


class MissingFieldException(PortalException):
    """A required input is absent"""
    status_code = 400

    def __init__(self, message: str = None):
        super().__init__(message, code=ErrorCode.MISSING_REQUIRED_FIELD)
        logger.warning(f"Missing field: {self.message}")


class InvalidFormatException(PortalException):
    """An input is present but malformed"""
    status_code = 400

    def __init__(self, message: str = None):
        super().__init__(message, code=ErrorCode.INVALID_FORMAT)
        logger.warning(f"Invalid format: {self.message}")


class AuthenticationException(PortalException):
    """
    Credential mismatch or expiry.

    The client only ever sees the generic message; `reason` is kept for
    logs, metrics and the audit trail.
    """
    status_code = 401

    def __init__(self, reason: str = "failed", message: str = None):
        super().__init__(message, code=ErrorCode.AUTHENTICATION_FAILED)
        self.reason = reason
        logger.warning(f"Authentication failed: {reason}")


class ShareholderNotFoundException(PortalException):
    status_code = 404

    def __init__(self, message: str = None):
        super().__init__(message, code=ErrorCode.SHAREHOLDER_NOT_FOUND)


class QrCodeInvalidException(PortalException):
    """Scanned identifier does not resolve to a shareholder"""
    status_code = 404

    def __init__(self, message: str = None):
        super().__init__(message, code=ErrorCode.QR_CODE_INVALID)
        logger.warning(f"QR code invalid: {self.message}")


class SessionNotFoundException(PortalException):
    status_code = 404

    def __init__(self, message: str = None):
        super().__init__(message, code=ErrorCode.SESSION_NOT_FOUND)


class CooldownActiveException(PortalException):
    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = int(retry_after)
        super().__init__(
            f"Please wait {self.retry_after} seconds before requesting another verification code",
            code=ErrorCode.COOLDOWN_ACTIVE,
        )
        logger.info(f"Resend cooldown active, retry after {self.retry_after}s")


class DatabaseException(PortalException):
    """Storage collaborator unreachable or query failed"""
    status_code = 500

    def __init__(self, message: str = None):
        super().__init__(message, code=ErrorCode.DATABASE_ERROR)
        logger.error(f"Database error: {self.message}")


class DeliveryException(PortalException):
    """Outbound SMS could not be delivered"""
    status_code = 500

    def __init__(self, message: str = None):
        super().__init__(message, code=ErrorCode.SMS_DELIVERY_FAILED)
        logger.error(f"SMS delivery error: {self.message}")


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'success': False,
            'error': {
                'code': e.name.upper().replace(' ', '_'),
                'message': e.description,
            }
        }), e.code

    @app.errorhandler(PortalException)
    def handle_portal_exception(e):
        """Handle portal exceptions with their own status code"""
        response = jsonify(e.to_dict())
        if isinstance(e, CooldownActiveException):
            response.headers['Retry-After'] = str(e.retry_after)
        return response, e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_exception(e):
        """Handle storage failures that escaped a service"""
        logger.error(f"Unhandled database error: {e}", exc_info=True)
        return jsonify(DatabaseException().to_dict()), 500

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify(PortalException().to_dict()), 500
