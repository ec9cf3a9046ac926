from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, current_app, request
from sqlalchemy.exc import SQLAlchemyError
import time

# Database Metrics
db_shareholders_total = Gauge("portal_shareholders_total", "Total number of shareholders")
db_sessions_total = Gauge("portal_verification_sessions_total", "Total number of verification sessions")

# API Metrics
api_request_duration_seconds = Histogram(
    "portal_api_request_duration_seconds", "API request duration", ["endpoint", "method"]
)

api_requests_total = Counter("portal_api_requests_total", "Total API requests", ["endpoint", "method", "status_code"])

# Verification Metrics
codes_issued_total = Counter("portal_codes_issued_total", "Verification codes issued", ["mode"])

verifications_total = Counter(
    "portal_verifications_total", "Verification attempts", ["type", "outcome"]
)

contact_updates_total = Counter("portal_contact_updates_total", "Contact update submissions", ["changed"])

audit_write_failures_total = Counter(
    "portal_audit_write_failures_total", "Audit writes that failed and were swallowed", ["event"]
)


def init_metrics(app):
    @app.route("/api/metrics")
    def metrics():
        update_db_metrics()
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    app.logger.info("Prometheus metrics initialized at /api/metrics")


def update_db_metrics():
    """Update row-count gauges; a failing count leaves the last value."""
    try:
        from repositories.shareholder_repository import ShareholderRepository
        from repositories.verification_session_repository import VerificationSessionRepository

        db_shareholders_total.set(ShareholderRepository.count())
        db_sessions_total.set(VerificationSessionRepository.count())
    except SQLAlchemyError:
        current_app.logger.warning("Failed to refresh database metrics", exc_info=True)
