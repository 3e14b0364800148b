from __future__ import annotations

from flask import Blueprint, abort, flash, render_template, request

from app.portal.constants import RESOURCE_TYPES, SIERRA_LEONE_REGIONS
from app.portal.db import db_session
from app.portal.modules.content.service import CASES, NEWS, RESOURCES, ContentKind, distinct_values, get_published, list_published
from app.portal.validation import validate_payload

bp = Blueprint("content_public", __name__)


def _parse_filters(kind: ContentKind):
    filters, errors = validate_payload(kind.filters_schema, dict(request.args.items()))
    if errors:
        for e in errors:
            flash(e, "danger")
        filters = kind.filters_schema()
    return filters


def _detail(kind: ContentKind, slug: str):
    s = db_session()
    item = get_published(s, kind, slug)
    if item is None:
        abort(404)
    s.commit()
    return render_template(f"public/{kind.key}/detail.html", item=item)


@bp.get("/cases")
def cases_list():
    s = db_session()
    filters = _parse_filters(CASES)
    items, pagination = list_published(s, CASES, filters)
    return render_template(
        "public/cases/list.html",
        items=items,
        pagination=pagination,
        filters=filters,
        sectors=distinct_values(s, CASES, "sector"),
        regions=SIERRA_LEONE_REGIONS,
    )


@bp.get("/cases/<slug>")
def case_detail(slug: str):
    return _detail(CASES, slug)


@bp.get("/news")
def news_list():
    s = db_session()
    filters = _parse_filters(NEWS)
    items, pagination = list_published(s, NEWS, filters)
    return render_template(
        "public/news/list.html",
        items=items,
        pagination=pagination,
        filters=filters,
        categories=distinct_values(s, NEWS, "category"),
    )


@bp.get("/news/<slug>")
def news_detail(slug: str):
    return _detail(NEWS, slug)


@bp.get("/resources")
def resources_list():
    s = db_session()
    filters = _parse_filters(RESOURCES)
    items, pagination = list_published(s, RESOURCES, filters)
    return render_template(
        "public/resources/list.html",
        items=items,
        pagination=pagination,
        filters=filters,
        categories=distinct_values(s, RESOURCES, "category"),
        resource_types=RESOURCE_TYPES,
    )


@bp.get("/resources/<slug>")
def resource_detail(slug: str):
    return _detail(RESOURCES, slug)
