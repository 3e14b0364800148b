from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field, model_validator

from app.portal.validation import BaseSchema

# Settings the site cannot run without; an explicit null or blank is rejected.
_REQUIRED_SETTINGS = {
    "site_name": "Site name",
    "featured_properties_count": "Featured properties count",
    "enable_anonymous_reports": "Enable anonymous reports",
    "maintenance_mode": "Maintenance mode",
}


class SiteSettingsUpdate(BaseSchema):
    """Partial update; only keys present in the request are stored."""

    site_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    site_description: Optional[str] = Field(default=None, max_length=1000)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    contact_address: Optional[str] = Field(default=None, max_length=500)
    social_facebook: Optional[str] = Field(default=None, max_length=512)
    social_twitter: Optional[str] = Field(default=None, max_length=512)
    social_linkedin: Optional[str] = Field(default=None, max_length=512, alias="socialLinkedIn")
    social_youtube: Optional[str] = Field(default=None, max_length=512, alias="socialYouTube")
    featured_properties_count: Optional[int] = Field(default=None, ge=1, le=20)
    enable_anonymous_reports: Optional[bool] = None
    maintenance_mode: Optional[bool] = None
    footer_text: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _required_settings_present(self) -> "SiteSettingsUpdate":
        for field, label in _REQUIRED_SETTINGS.items():
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{label} cannot be empty")
        return self


class SubscribeRequest(BaseSchema):
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=128)
    categories: Optional[list[str]] = None
