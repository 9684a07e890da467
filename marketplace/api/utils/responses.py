from flask import jsonify, request

from marketplace.errors import ApiError


def send_response(data=None, message: str = "", status: int = 200, meta: dict | None = None):
    """Success envelope shared by all JSON endpoints."""
    body = {"ok": True, "message": message}
    if meta is not None:
        body["meta"] = meta
    body["data"] = data
    return jsonify(body), status


def get_payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def payload_str(data: dict, key: str, strip: bool = True) -> str:
    """Stripped text value of ``key``; ``""`` when absent or null, 400 for non-strings."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ApiError(400, f"Invalid '{key}'")
    return value.strip() if strip else value
