import time

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

import db
from api.blueprint import create_api_blueprint
from api.schemas.api_responses import fail, fail_from_error
from api.services.form4_service import build_form4_service
from logging_utils import configure_app_logging, get_logger
from utils.errors import FilingsError


def init_db() -> None:
    """Create tables (watchlist) if missing."""

    import models  # noqa: F401  (registers models on Base.metadata)

    db.Base.metadata.create_all(bind=db.engine)


def create_app(*, form4_service=None) -> Flask:
    app = Flask(__name__)

    # Load config from file.
    app.config.from_pyfile("settings.py")

    # Configure unified app logging (UTC timestamps, per-file logs, daily rotation)
    configure_app_logging(app.config.get("LOG_LEVEL", "INFO"))
    logger = get_logger(__name__)

    if not app.config.get("SEC_USER_AGENT"):
        logger.warning(
            "SEC_USER_AGENT is not set; SEC may reject requests without contact info"
        )

    # Pipeline + ticker registry cache live for the lifetime of the app.
    app.extensions["form4_service"] = form4_service or build_form4_service(app.config)

    # --- slow request logging (opt-in by threshold; default 250ms) ---
    # Set to "0" to disable (or keep it low temporarily when investigating perf).
    slow_ms = int(app.config.get("SLOW_REQUEST_MS") or 0)

    @app.before_request
    def _start_timer():
        if slow_ms > 0:
            request.environ["_req_start_ns"] = time.perf_counter_ns()

    @app.after_request
    def _log_slow_requests(resp):
        if slow_ms <= 0:
            return resp

        start_ns = request.environ.get("_req_start_ns")
        if not start_ns:
            return resp

        elapsed_ms = (time.perf_counter_ns() - int(start_ns)) / 1_000_000.0
        if elapsed_ms >= slow_ms:
            # Keep it compact and stable for grepping.
            logger.warning(
                "SLOW_REQUEST ms=%.1f status=%s method=%s path=%s query=%s",
                elapsed_ms,
                getattr(resp, "status_code", "?"),
                request.method,
                request.path,
                request.query_string.decode("utf-8", errors="replace"),
            )
        return resp

    enable_watchlist = bool(app.config.get("ENABLE_WATCHLIST", True))
    app.register_blueprint(create_api_blueprint(enable_watchlist=enable_watchlist))

    # Error handlers
    @app.errorhandler(FilingsError)
    def filings_error(err: FilingsError):
        if err.status_code >= 500:
            logger.warning(
                "Request failed | path=%s code=%s msg=%s",
                request.path,
                err.code,
                err.message,
            )
        payload, status = fail_from_error(err)
        return jsonify(payload), status

    @app.errorhandler(HTTPException)
    def http_error(err: HTTPException):
        code = (err.name or "error").lower().replace(" ", "_")
        return jsonify(fail(err.description or err.name, code=code)), err.code

    @app.errorhandler(Exception)
    def server_error(_err):
        logger.exception("Unhandled server error")
        return jsonify(fail("Internal server error", code="internal_error")), 500

    if enable_watchlist or app.config.get("INIT_DB_ON_STARTUP"):
        init_db()

    return app


# NOTE: Do not instantiate the Flask app at import time.
# Tests patch the DB engine/sessionmaker before calling create_app().
app: Flask | None = None


if __name__ == "__main__":
    app = create_app()
    get_logger(__name__).info("Starting Flask app")
    app.run(debug=True, use_reloader=False)
