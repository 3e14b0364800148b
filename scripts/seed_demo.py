"""
Load a small set of demo records (properties, content, statistics) for local development.

Runs through the same services as the admin UI, so every record gets an audit event.
Skips everything if any property already exists.

Usage:
  python scripts/seed_demo.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.portal.models import User
from app.portal.modules.content.service import CASES, NEWS, RESOURCES, create_content
from app.portal.modules.properties.models import Property
from app.portal.modules.properties.schemas import PropertyCreate
from app.portal.modules.properties.service import create_property
from app.portal.modules.statistics.schemas import RecoveryStatisticCreate
from app.portal.modules.statistics.service import create_statistic
from scripts._db_utils import script_session

_PROPERTIES = [
    {
        "title": "Four-bedroom residence at Hill Station",
        "description": "Detached family house with boys' quarters, recovered following a procurement fraud conviction.",
        "type": "RESIDENTIAL",
        "region": "Western Area Urban",
        "district": "Freetown",
        "estimated_value": 2_500_000,
        "minimum_bid": 2_000_000,
        "bedrooms": 4,
        "bathrooms": 3,
        "features": ["Generator", "Borehole", "Perimeter wall"],
        "is_featured": True,
        "publish": True,
    },
    {
        "title": "Commercial plot on Wilkinson Road",
        "description": "Half-town-lot with planning approval for a three-storey commercial building.",
        "type": "LAND",
        "region": "Western Area Urban",
        "estimated_value": 900_000,
        "size": "0.25 acres",
        "publish": True,
    },
    {
        "title": "Toyota Land Cruiser (2019)",
        "description": "Government-registered vehicle recovered from a former procurement officer; runs well.",
        "type": "VEHICLE",
        "region": "Bombali",
        "estimated_value": 450_000,
        "status": "UNDER_AUCTION",
        "is_featured": True,
        "publish": True,
    },
]

_CASES = [
    {
        "title": "Former district health officer convicted of embezzlement",
        "summary": "The High Court convicted a former district officer for diverting drug procurement funds.",
        "content": "Following an ACC investigation, the accused was found guilty on four counts of "
        "misappropriation of public funds and ordered to repay the full amount to the Consolidated Fund.",
        "defendant": "J. Kamara",
        "charges": ["Misappropriation of public funds", "Abuse of office"],
        "verdict": "Guilty",
        "amount_involved": 1_200_000,
        "amount_recovered": 950_000,
        "sector": "Health",
        "region": "Bo",
        "status": "PUBLISHED",
    },
]

_NEWS = [
    {
        "title": "Commission launches 2024 integrity pledge campaign",
        "excerpt": "Ministries, departments and agencies sign on to the national integrity pledge.",
        "content": "The Commission today launched its annual integrity pledge campaign across all "
        "ministries, departments and agencies, with pledges to be reviewed at mid-year.",
        "category": "Announcements",
        "tags": ["integrity", "prevention"],
        "status": "PUBLISHED",
    },
]

_RESOURCES = [
    {
        "title": "How to report corruption safely",
        "description": "A short guide explaining anonymous reporting, evidence handling and whistleblower protection.",
        "category": "Guides",
        "resource_type": "ARTICLE",
        "content": "You can report corruption anonymously through the online form or the toll-free line 515.",
        "status": "PUBLISHED",
    },
]

_STATISTICS = [
    {
        "period": "2022",
        "period_type": "yearly",
        "total_recovered": 18_400_000,
        "funds_to_treasury": 15_100_000,
        "cases_closed": 41,
        "prosecutions": 38,
        "convictions": 27,
        "acquittals": 6,
        "properties_seized": 9,
        "properties_auctioned": 4,
        "sector_breakdown": {"Health": 6_000_000, "Education": 4_200_000, "Procurement": 8_200_000},
        "region_breakdown": {"Western Area Urban": 11_000_000, "Bombali": 7_400_000},
    },
    {
        "period": "2023",
        "period_type": "yearly",
        "total_recovered": 23_900_000,
        "funds_to_treasury": 20_300_000,
        "cases_closed": 52,
        "prosecutions": 44,
        "convictions": 35,
        "acquittals": 5,
        "properties_seized": 12,
        "properties_auctioned": 7,
        "sector_breakdown": {"Health": 7_500_000, "Mining": 9_100_000, "Procurement": 7_300_000},
        "region_breakdown": {
            "Western Area Urban": 13_200_000,
            "Kenema": 6_000_000,
            "Bo": 4_700_000,
        },
    },
]


def seed_demo(*, database_url: str | None = None) -> None:
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///portal.db").strip()
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@anticorruption.gov.sl").strip().lower()

    with script_session(db_url) as s:
        if s.query(Property).count():
            print("Demo data skipped: properties already exist.")
            return
        admin = s.query(User).filter(User.email == admin_email).one_or_none()
        if admin is None:
            raise RuntimeError(f"Admin user {admin_email} not found. Run scripts/init_db.py first.")

        for data in _PROPERTIES:
            create_property(s, PropertyCreate.model_validate(data), admin)
        for kind, rows in ((CASES, _CASES), (NEWS, _NEWS), (RESOURCES, _RESOURCES)):
            for data in rows:
                create_content(s, kind, kind.create_schema.model_validate(data), admin)
        for data in _STATISTICS:
            create_statistic(s, RecoveryStatisticCreate.model_validate(data), admin)

    print("Demo data loaded.")


def main() -> None:
    seed_demo()


if __name__ == "__main__":
    main()
