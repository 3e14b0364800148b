import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, flash, g, jsonify, redirect, render_template, request, session, url_for

from app.portal.config import load_config
from app.portal.db import db_session, init_db, teardown_db_session
from app.portal.routes import bp as routes_bp
from app.portal.auth import bp as auth_bp, load_current_user
from app.portal.admin import bp as admin_bp
from app.portal.modules.properties.public import bp as properties_public_bp
from app.portal.modules.properties.admin import bp as properties_admin_bp
from app.portal.modules.properties.api import bp as properties_api_bp
from app.portal.modules.content.public import bp as content_public_bp
from app.portal.modules.content.admin import bp as content_admin_bp
from app.portal.modules.content.api import bp as content_api_bp
from app.portal.modules.statistics.public import bp as statistics_public_bp
from app.portal.modules.statistics.admin import bp as statistics_admin_bp
from app.portal.modules.statistics.api import bp as statistics_api_bp
from app.portal.modules.reports.public import bp as reports_public_bp
from app.portal.modules.reports.admin import bp as reports_admin_bp
from app.portal.modules.reports.api import bp as reports_api_bp
from app.portal.modules.users.admin import bp as users_admin_bp
from app.portal.modules.users.api import bp as users_api_bp
from app.portal.modules.settings.public import bp as settings_public_bp
from app.portal.modules.settings.admin import bp as settings_admin_bp
from app.portal.modules.settings.api import bp as settings_api_bp

logger = logging.getLogger(__name__)

_UNGUARDED_PREFIXES = ("/static/", "/health", "/healthz")
# Paths that keep working while the public site is in maintenance mode
_MAINTENANCE_ALLOWED = ("/admin", "/auth", "/api/admin", "/static/", "/uploads/", "/health", "/healthz")


def _is_api() -> bool:
    return request.path.startswith("/api/")


def _json_error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    from app.portal.security import csrf_exempt, ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_permissions() -> dict:
        from app.portal.rbac import user_has_permission

        def has_perm(key: str) -> bool:
            return user_has_permission(getattr(g, "current_user", None), key)

        return {"has_perm": has_perm}

    @app.context_processor
    def _inject_site_settings() -> dict:
        from app.portal.modules.settings.service import DEFAULT_SETTINGS, current_settings

        try:
            return {"site": current_settings(db_session())}
        except Exception as e:
            # Error pages must still render when the DB is unavailable.
            app.logger.error("Could not load site settings: %s", e)
            return {"site": dict(DEFAULT_SETTINGS)}

    from app.portal.utils import format_currency, format_date, format_short_date, get_initials, truncate

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d") -> str:
        if value is None:
            return "-"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.template_filter("longdate")
    def _longdate_filter(value) -> str:
        return format_date(value)

    @app.template_filter("shortdate")
    def _shortdate_filter(value) -> str:
        return format_short_date(value)

    @app.template_filter("initials")
    def _initials_filter(value) -> str:
        return get_initials(value or "")

    @app.template_filter("currency")
    def _currency_filter(value, currency: str = "SLE") -> str:
        return format_currency(value, currency)

    @app.template_filter("excerpt")
    def _excerpt_filter(value, length: int = 160) -> str:
        return truncate(value or "", length)

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(_UNGUARDED_PREFIXES):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Login/logout forms carry their own rate limiting
            if (request.endpoint or "").startswith("auth."):
                return None
            if csrf_exempt(request):
                return None
            if not validate_csrf(request):
                if _is_api():
                    return _json_error("CSRF token missing or invalid.", 400)
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    if hasattr(os, "register_at_fork"):
        def _after_fork_child():
            engine = app.extensions.get("sqlalchemy_engine")
            if engine:
                engine.dispose()

        os.register_at_fork(after_in_child=_after_fork_child)

    if app.config.get("STORAGE_BACKEND") == "s3":
        missing_s3 = [k for k in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY") if not app.config.get(k)]
        if missing_s3:
            app.logger.error("STORAGE CONFIG ERROR: Missing required S3 env vars: %s", ", ".join(missing_s3))

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    app.register_blueprint(properties_public_bp)
    app.register_blueprint(content_public_bp)
    app.register_blueprint(statistics_public_bp)
    app.register_blueprint(reports_public_bp)
    app.register_blueprint(settings_public_bp)

    app.register_blueprint(properties_admin_bp, url_prefix="/admin")
    app.register_blueprint(content_admin_bp, url_prefix="/admin")
    app.register_blueprint(statistics_admin_bp, url_prefix="/admin")
    app.register_blueprint(reports_admin_bp, url_prefix="/admin")
    app.register_blueprint(users_admin_bp, url_prefix="/admin")
    app.register_blueprint(settings_admin_bp, url_prefix="/admin")

    app.register_blueprint(properties_api_bp, url_prefix="/api")
    app.register_blueprint(content_api_bp, url_prefix="/api")
    app.register_blueprint(statistics_api_bp, url_prefix="/api")
    app.register_blueprint(reports_api_bp, url_prefix="/api")
    app.register_blueprint(users_api_bp, url_prefix="/api")
    app.register_blueprint(settings_api_bp, url_prefix="/api")

    app.before_request(load_current_user)
    app.teardown_appcontext(teardown_db_session)

    @app.before_request
    def _maintenance_guard():
        if request.path.startswith(_MAINTENANCE_ALLOWED):
            return None
        from app.portal.modules.settings.service import current_settings

        if not current_settings(db_session()).get("maintenance_mode"):
            return None
        # Signed-in staff can still preview the public site
        if getattr(g, "current_user", None) is not None:
            return None
        if _is_api():
            return _json_error("The site is under maintenance. Please try again later.", 503)
        return render_template("errors/503.html"), 503

    @app.errorhandler(400)
    def _err_400(e):
        if _is_api():
            return _json_error(getattr(e, "description", None) or "Bad request", 400)
        return render_template("errors/400.html", message=getattr(e, "description", None)), 400

    @app.errorhandler(403)
    def _err_403(e):
        missing = getattr(g, "missing_permission", None)
        if missing:
            app.logger.warning("Forbidden: missing_permission=%s request_id=%s", missing, getattr(g, "request_id", None))
        if _is_api():
            return _json_error("Forbidden", 403)
        return render_template("errors/403.html", missing_permission=missing), 403

    @app.errorhandler(404)
    def _err_404(e):
        if _is_api():
            return _json_error("Not found", 404)
        return render_template("errors/404.html"), 404

    @app.errorhandler(405)
    def _err_405(e):
        if _is_api():
            return _json_error("Method not allowed", 405)
        return e

    @app.errorhandler(413)
    def _err_413(e):
        max_mb = int(app.config.get("MAX_CONTENT_LENGTH") or 0) // (1024 * 1024)
        message = f"File too large. Maximum upload size is {max_mb}MB."
        if _is_api():
            return _json_error(message, 413)
        flash(message, "danger")
        referrer = request.referrer
        if referrer and referrer.startswith(request.host_url):
            return redirect(referrer), 302
        return redirect(url_for("routes.index")), 302

    @app.errorhandler(500)
    def _err_500(e):
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        if _is_api():
            return _json_error("Internal server error", 500)
        return render_template("errors/500.html"), 500

    logger.info("create_app() complete; app ready to serve")
    return app
