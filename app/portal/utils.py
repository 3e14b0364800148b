from __future__ import annotations

import math
import re
import secrets
import time
from datetime import date, datetime
from decimal import Decimal
from typing import Any

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def _now_ms() -> int:
    return int(time.time() * 1000)


def slugify(text: str) -> str:
    text = (text or "").lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return re.sub(r"^-+|-+$", "", text)


def generate_slug(text: str) -> str:
    """Slug with a short time-based suffix so repeated titles stay unique."""
    base = slugify(text)
    suffix = _base36(_now_ms())[-4:]
    return f"{base}-{suffix}"


def generate_reference_number(prefix: str = "ACC") -> str:
    stamp = _base36(_now_ms()).upper()
    rand = "".join(secrets.choice(_BASE36) for _ in range(4)).upper()
    return f"{prefix}-{stamp}-{rand}"


def format_currency(amount: float | int | Decimal | None, currency: str = "SLE") -> str:
    if amount is None:
        return "-"
    return f"{currency} {float(amount):,.0f}"


def format_date(value: date | datetime | None) -> str:
    if value is None:
        return "-"
    return f"{value.day} {value.strftime('%B %Y')}"


def format_short_date(value: date | datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length].strip() + "..."


def get_initials(name: str) -> str:
    return "".join(part[0] for part in name.split() if part).upper()[:2]


def calculate_percentage(value: float, total: float) -> int:
    if total == 0:
        return 0
    return round(value / total * 100)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def pagination_dict(total: int, page: int, limit: int) -> dict:
    return {"total": total, "page": page, "limit": limit, "total_pages": total_pages(total, limit)}


def parse_date(s: str | None) -> date | None:
    """Parse YYYY-MM-DD date string."""
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    return date.fromisoformat(s)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def model_to_dict(obj: Any, *, exclude: tuple[str, ...] = ()) -> dict:
    """Column values of a mapped instance, JSON-ready."""
    return {
        col.key: to_jsonable(getattr(obj, col.key))
        for col in obj.__table__.columns
        if col.key not in exclude
    }
