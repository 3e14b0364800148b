from __future__ import annotations

from typing import Any

from flask import jsonify, request


def ok(data: Any = None, status: int = 200, **extra: Any):
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def fail(error: str, status: int = 400, *, errors: list[str] | None = None):
    body: dict[str, Any] = {"success": False, "error": error}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def validation_failed(errors: list[str]):
    return fail(errors[0] if errors else "Invalid input data", 400, errors=errors)


def json_body() -> Any:
    """Parsed JSON body, or None when the body is missing or not JSON."""
    return request.get_json(silent=True)


def query_args() -> dict[str, str]:
    return {k: v for k, v in request.args.items()}
