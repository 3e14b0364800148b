import mimetypes

from flask import Blueprint, abort, current_app, render_template, send_file

from app.portal.db import db_session
from app.portal.modules.content.service import CASES, NEWS, latest_published
from app.portal.modules.properties.service import featured_properties
from app.portal.modules.settings.service import current_settings
from app.portal.modules.statistics.service import dashboard_stats
from app.portal.storage import StorageError, storage_from_config

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    s = db_session()
    settings = current_settings(s)
    return render_template(
        "public/index.html",
        featured=featured_properties(s, int(settings.get("featured_properties_count") or 6)),
        cases=latest_published(s, CASES, 3),
        news=latest_published(s, NEWS, 3),
        summary=dashboard_stats(s)["summary"],
    )


@bp.get("/uploads/<path:key>")
def uploaded_file(key: str):
    storage = storage_from_config(current_app.config)
    try:
        if not storage.exists(key):
            abort(404)
        fobj = storage.open(key)
    except StorageError:
        abort(404)
    mimetype = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return send_file(fobj, mimetype=mimetype, download_name=key.rsplit("/", 1)[-1], max_age=3600)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """Fast health check for load balancer probes. No DB access."""
    return "ok", 200
