# services/ark_client.py
from typing import Any, Dict, List

from openai import OpenAI

from config import Settings
from prompts import SYSTEM_PROMPT, USER_PROMPT


def build_messages(images: List[str]) -> List[Dict[str, Any]]:
    """One image_url part per image, then the fixed instruction text."""
    parts: List[Dict[str, Any]] = [
        {"type": "image_url", "image_url": {"url": img}} for img in images
    ]
    parts.append({"type": "text", "text": USER_PROMPT.strip()})
    return [
        {"role": "system", "content": SYSTEM_PROMPT.strip()},
        {"role": "user", "content": parts},
    ]


def make_client(settings: Settings) -> OpenAI:
    # Ark speaks the OpenAI chat-completions protocol. No local timeout and no
    # SDK retries: the upstream's own timeout governs and failures are final.
    return OpenAI(
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout=None,
        max_retries=0,
    )


def call_model(client: OpenAI, settings: Settings, images: List[str]) -> Any:
    """Send one chat completion and return choices[0].message."""
    resp = client.chat.completions.create(
        model=settings.model,
        reasoning_effort=settings.reasoning_effort,
        messages=build_messages(images),
    )
    if not resp.choices:
        raise RuntimeError("model returned no choices")
    return resp.choices[0].message


def upstream_error_message(exc: Exception) -> str:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str) and err["message"]:
            return err["message"]
        if isinstance(body.get("message"), str) and body["message"]:
            return body["message"]
    return f"Analysis failed: {str(exc) or 'unknown error'}"
