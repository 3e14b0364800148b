from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from flask import g, has_request_context

from app.portal.audit import record_event
from app.portal.modules.settings.models import EmailSubscription, SiteSetting

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.portal.models import User
    from app.portal.modules.settings.schemas import SiteSettingsUpdate, SubscribeRequest

DEFAULT_SETTINGS: dict[str, Any] = {
    "site_name": "Anti-Corruption Commission",
    "site_description": "Transparency portal of the Anti-Corruption Commission of Sierra Leone.",
    "contact_email": None,
    "contact_phone": None,
    "contact_address": None,
    "social_facebook": None,
    "social_twitter": None,
    "social_linkedin": None,
    "social_youtube": None,
    "featured_properties_count": 6,
    "enable_anonymous_reports": True,
    "maintenance_mode": False,
    "footer_text": None,
}

DEFAULT_SUBSCRIPTION_CATEGORIES = ["news", "updates"]


class SubscriptionError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def stored_settings(s: "Session") -> dict[str, Any]:
    """Only the keys that have been saved."""
    return {row.key: row.value for row in s.query(SiteSetting).order_by(SiteSetting.key.asc()).all()}


def get_settings(s: "Session") -> dict[str, Any]:
    """Defaults overlaid with saved values."""
    settings = dict(DEFAULT_SETTINGS)
    settings.update(stored_settings(s))
    return settings


def current_settings(s: "Session") -> dict[str, Any]:
    # Cached per request; layout, maintenance check and views all read it.
    if has_request_context():
        cached = g.get("site_settings")
        if cached is None:
            cached = get_settings(s)
            g.site_settings = cached
        return cached
    return get_settings(s)


def update_settings(s: "Session", payload: "SiteSettingsUpdate", user: "User") -> dict[str, Any]:
    provided = payload.model_dump(exclude_unset=True)
    existing = {row.key: row for row in s.query(SiteSetting).filter(SiteSetting.key.in_(provided.keys())).all()}
    now = datetime.utcnow()
    changes: dict[str, dict] = {}
    for key, value in provided.items():
        row = existing.get(key)
        if row is None:
            s.add(SiteSetting(key=key, value=value, updated_at=now))
            changes[key] = {"old": None, "new": value}
        elif row.value != value:
            changes[key] = {"old": row.value, "new": value}
            row.value = value
            row.updated_at = now
    s.flush()

    record_event(
        s,
        actor=user,
        action="settings.update",
        entity_type="SiteSetting",
        metadata={"changes": changes},
    )
    if has_request_context():
        g.pop("site_settings", None)
    return get_settings(s)


def subscribe(s: "Session", payload: "SubscribeRequest") -> tuple[EmailSubscription, str]:
    """Create or reactivate a newsletter subscription. Returns (subscription, message)."""
    email = str(payload.email).lower()
    now = datetime.utcnow()
    sub = s.query(EmailSubscription).filter(EmailSubscription.email == email).one_or_none()
    if sub is not None:
        if sub.is_active:
            raise SubscriptionError("This email is already subscribed")
        sub.is_active = True
        sub.unsubscribed_at = None
        sub.confirmed_at = now
        return sub, "Your subscription has been reactivated"

    sub = EmailSubscription(
        email=email,
        name=payload.name,
        categories=payload.categories or list(DEFAULT_SUBSCRIPTION_CATEGORIES),
        is_active=True,
        # No confirmation mail is sent; subscriptions are confirmed on creation.
        confirmed_at=now,
        created_at=now,
    )
    s.add(sub)
    s.flush()
    return sub, "You have been successfully subscribed to our newsletter"

