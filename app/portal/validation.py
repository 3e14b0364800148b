from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

S = TypeVar("S", bound=BaseModel)


class BaseSchema(BaseModel):
    """Request-body schema: accepts snake_case or camelCase keys, blank strings count as absent."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _blank_to_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: (None if isinstance(v, str) and not v.strip() else v) for k, v in data.items()}
        return data


def split_list(value: Any) -> Any:
    """Form fields send lists as comma/newline separated text."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.replace("\r", "").replace("\n", ",").split(",")
        return [p.strip() for p in parts if p.strip()]
    return value


def format_errors(exc: ValidationError) -> list[str]:
    errors: list[str] = []
    for err in exc.errors():
        msg = str(err.get("msg") or "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        loc = [str(p) for p in err.get("loc") or () if not isinstance(p, int)]
        errors.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return errors


def validate_payload(schema: type[S], data: Any) -> tuple[S | None, list[str]]:
    """Validate data against schema. Returns (model, []) or (None, errors)."""
    if not isinstance(data, dict):
        return None, ["Request body must be a JSON object."]
    try:
        return schema.model_validate(data), []
    except ValidationError as e:
        return None, format_errors(e)


def form_payload(form, fields: tuple[str, ...], *, checkboxes: tuple[str, ...] = ()) -> dict:
    """Collect HTML form fields into a dict; unchecked checkboxes become False."""
    payload: dict[str, Any] = {}
    for name in fields:
        if name in form:
            payload[name] = form.get(name)
    for name in checkboxes:
        payload[name] = name in form and form.get(name) not in ("", "0", "false", "off")
    return payload
