# services/api_client.py
import json
from typing import Any, Dict, List, Optional

import requests

GENERIC_FAILURE = "Analysis failed, please try again later"


class AnalyzeFailed(RuntimeError):
    pass


def parse_error_message(error_like: Any) -> Optional[str]:
    """Pull a human readable message out of whatever an error response carried."""
    if not error_like:
        return None
    if isinstance(error_like, str):
        return error_like
    if not isinstance(error_like, dict):
        return str(error_like)

    for key in ("message", "error", "detail"):
        if isinstance(error_like.get(key), str) and error_like[key]:
            return error_like[key]
    if isinstance(error_like.get("error"), dict):
        nested = parse_error_message(error_like["error"])
        if nested:
            return nested
    try:
        return json.dumps(error_like, ensure_ascii=False)
    except (TypeError, ValueError):
        return None


def call_analyze(api_base: str, images: List[str]) -> Dict[str, Any]:
    # no timeout: the server and its upstream decide how long an analysis may take
    try:
        r = requests.post(api_base.rstrip("/") + "/api/analyze", json={"images": images}, timeout=None)
    except requests.RequestException as e:
        raise AnalyzeFailed(parse_error_message(str(e)) or GENERIC_FAILURE) from e

    try:
        body = r.json()
    except ValueError:
        body = r.text

    if not r.ok:
        msg = None
        if isinstance(body, dict):
            msg = parse_error_message(body.get("error"))
        msg = msg or parse_error_message(body) or f"{r.status_code} {r.reason}"
        raise AnalyzeFailed(msg.strip())
    if not isinstance(body, dict):
        raise AnalyzeFailed("Unexpected analysis result format, please try again later")
    return body
