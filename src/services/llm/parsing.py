import json
import re
from typing import Any

from common.errors import ErrorKind, ProviderError

FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` (or bare ```) wrapper if the model added one."""
    match = FENCE_PATTERN.search(text)
    return match.group(1).strip() if match else text.strip()


def parse_json_response(text: str) -> Any:
    """
    Parse model output as JSON.

    Tries the fenced/trimmed text first, then the outermost {...} or [...] span,
    since models sometimes wrap the JSON in prose.
    """
    cleaned = strip_code_fences(text or "")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = cleaned.find(opener), cleaned.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start : end + 1])
            except json.JSONDecodeError:
                continue

    raise ProviderError(ErrorKind.PARSE, f"Could not parse JSON from model output: {cleaned[:120]!r}", provider="openai")
