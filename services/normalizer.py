# services/normalizer.py
"""
Turn a chat-completion message into (narrative text, structured object).

The model is told to answer with strict JSON but nothing guarantees it, so every
step degrades instead of raising: a reply we cannot parse is shown as raw text.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Union

_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


@dataclass
class TextContent:
    text: str


@dataclass
class PartsContent:
    parts: List[Any]


@dataclass
class ObjectContent:
    value: Any


@dataclass
class EmptyContent:
    pass


MessageContent = Union[TextContent, PartsContent, ObjectContent, EmptyContent]


@dataclass
class NormalizedResult:
    raw: str
    data: Optional[Any]


def classify_content(content: Any) -> MessageContent:
    if content is None:
        return EmptyContent()
    if isinstance(content, str):
        return TextContent(content)
    if isinstance(content, (list, tuple)):
        return PartsContent(list(content))
    return ObjectContent(content)


def _part_text(part: Any) -> str:
    # upstreams send either bare strings, {"type": "text", "text": ...} or {"content": ...}
    if isinstance(part, str):
        return part
    if isinstance(part, dict):
        if isinstance(part.get("text"), str):
            return part["text"]
        if isinstance(part.get("content"), str):
            return part["content"]
        return ""
    text = getattr(part, "text", None)
    if isinstance(text, str):
        return text
    return ""


def flatten_content(content: Any) -> str:
    shape = classify_content(content)
    if isinstance(shape, TextContent):
        return shape.text
    if isinstance(shape, PartsContent):
        return "\n".join(t for t in (_part_text(p) for p in shape.parts) if t)
    if isinstance(shape, ObjectContent):
        return json.dumps(shape.value, ensure_ascii=False, default=str)
    if isinstance(shape, EmptyContent):
        return ""
    raise TypeError(f"unhandled content shape: {type(shape).__name__}")


def extract_json(text: str) -> Optional[Any]:
    """Parse ``text`` as JSON, else the greedy first-``{``-to-last-``}`` span, else None."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        pass
    m = _OBJECT_SPAN.search(text)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except ValueError:
        return None


def normalize_content(content: Any) -> NormalizedResult:
    text = flatten_content(content)
    parsed = extract_json(text)
    if parsed is None:
        return NormalizedResult(raw=text, data=None)

    raw = text
    data = parsed
    if isinstance(parsed, dict):
        if isinstance(parsed.get("raw_text"), str) and parsed["raw_text"]:
            raw = parsed["raw_text"]
        if isinstance(parsed.get("structured"), dict):
            data = parsed["structured"]
    return NormalizedResult(raw=raw, data=data)


def normalize_message(message: Any) -> NormalizedResult:
    """Accepts a message dict, an SDK message object, or None."""
    if isinstance(message, dict):
        content = message.get("content")
    else:
        content = getattr(message, "content", None)
    return normalize_content(content)
