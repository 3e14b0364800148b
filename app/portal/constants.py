"""
Central constants for the transparency portal.
"""
from __future__ import annotations

SIERRA_LEONE_REGIONS = (
    "Western Area Urban",
    "Western Area Rural",
    "Bo",
    "Bonthe",
    "Moyamba",
    "Pujehun",
    "Kenema",
    "Kailahun",
    "Kono",
    "Bombali",
    "Falaba",
    "Koinadugu",
    "Tonkolili",
    "Kambia",
    "Karene",
    "Port Loko",
)

DEFAULT_CURRENCY = "SLE"

PROPERTY_TYPES = ("RESIDENTIAL", "COMMERCIAL", "LAND", "VEHICLE", "EQUIPMENT", "OTHER")
PROPERTY_STATUSES = ("AVAILABLE", "UNDER_AUCTION", "SOLD", "RESERVED", "WITHDRAWN")
# Statuses that no longer accept expressions of interest
PROPERTY_CLOSED_STATUSES = frozenset({"SOLD", "WITHDRAWN"})

EOI_STATUSES = ("PENDING", "UNDER_REVIEW", "APPROVED", "REJECTED", "WITHDRAWN")

CONTENT_STATUSES = ("DRAFT", "PUBLISHED", "ARCHIVED")
RESOURCE_TYPES = ("ARTICLE", "VIDEO", "PDF", "INFOGRAPHIC")

REPORT_CATEGORIES = (
    "BRIBERY",
    "EMBEZZLEMENT",
    "FRAUD",
    "NEPOTISM",
    "ABUSE_OF_OFFICE",
    "PROCUREMENT_FRAUD",
    "EXTORTION",
    "MONEY_LAUNDERING",
    "OTHER",
)
REPORT_STATUSES = (
    "RECEIVED",
    "UNDER_REVIEW",
    "INVESTIGATING",
    "CLOSED_SUBSTANTIATED",
    "CLOSED_UNSUBSTANTIATED",
    "REFERRED",
)
REPORT_OPEN_STATUSES = ("RECEIVED", "UNDER_REVIEW")
REPORT_PRIORITIES = ("LOW", "MEDIUM", "HIGH", "URGENT")

PERIOD_TYPES = ("monthly", "quarterly", "yearly")

NATIONALITY_LOCAL = "Sierra Leonean"

# RBAC: permission key -> display name
PERMISSIONS = {
    "admin.view": "Admin: view shell",
    "properties.view": "Properties: view",
    "properties.edit": "Properties: create/edit",
    "properties.delete": "Properties: delete",
    "content.view": "Content: view",
    "content.edit": "Content: create/edit",
    "content.delete": "Content: delete",
    "statistics.view": "Statistics: view",
    "statistics.edit": "Statistics: create/edit",
    "statistics.delete": "Statistics: delete",
    "reports.view": "Reports: view",
    "reports.edit": "Reports: update",
    "users.manage": "Users: manage",
    "settings.manage": "Settings: manage",
    "audit.view": "Audit: view",
}

ROLES = {
    "admin": "Administrator",
    "editor": "Editor",
    "viewer": "Viewer",
}

ROLE_PERMISSIONS = {
    "admin": tuple(PERMISSIONS),
    "editor": (
        "admin.view",
        "properties.view",
        "properties.edit",
        "content.view",
        "content.edit",
        "statistics.view",
        "statistics.edit",
        "reports.view",
        "reports.edit",
    ),
    "viewer": (
        "admin.view",
        "properties.view",
        "content.view",
        "statistics.view",
        "reports.view",
    ),
}
