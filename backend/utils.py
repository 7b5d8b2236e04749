import json
import re
from typing import Any, Union

from errors import MalformedResponse

# ```json\n{...}\n```  — language tag optional, surrounding whitespace tolerated
_FENCE_RE = re.compile(r"^\s*```[\w+-]*[ \t]*\n?(?P<body>.*?)\n?[ \t]*```\s*$", re.DOTALL)


def strip_code_fence(text: str) -> tuple[str, bool]:
    """
    Remove a single markdown code fence wrapping the whole text.
    Returns the inner text and whether a fence was found.
    """
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body").strip(), True
    return text.strip(), False


def parse_json_payload(payload: Union[str, dict, list]) -> Any:
    """
    Turn a model payload into a JSON value.

    Decoder order: already-structured object → fenced string → bare string.
    Anything that survives none of them raises MalformedResponse with a short
    excerpt of the offending text.
    """
    if isinstance(payload, (dict, list)):
        return payload
    if not isinstance(payload, str):
        raise MalformedResponse(repr(payload), reason=f"Unexpected response data type: {type(payload).__name__}")

    inner, fenced = strip_code_fence(payload)
    if fenced:
        try:
            return json.loads(inner)
        except json.JSONDecodeError:
            raise MalformedResponse(payload)

    try:
        return json.loads(payload.strip())
    except json.JSONDecodeError:
        raise MalformedResponse(payload)


def truncate(text: str, max_chars: int) -> str:
    return text if len(text) <= max_chars else text[:max_chars]
