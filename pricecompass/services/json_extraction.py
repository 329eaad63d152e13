import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class ExtractionFailed(ValueError):
    """Model text could not be recovered as JSON."""

    def __init__(self, text: str):
        super().__init__("Could not parse JSON response")
        self.text = text


def _strip_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def _slice_between(text: str, opener: str, closer: str) -> str | None:
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def extract_json(text: str) -> Any:
    """Parse JSON out of model output that may be wrapped in fences or prose.

    Attempts, in order: the raw text, the text with code fences removed, the
    span from the first "{" to the last "}", and the span from the first "["
    to the last "]". Raises ExtractionFailed when none of them parse.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    clean = _strip_fences(text or "")
    try:
        return json.loads(clean)
    except json.JSONDecodeError:
        pass

    candidate = _slice_between(clean, "{", "}")
    if candidate is not None:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as exc:
            logger.warning("Found a JSON object candidate but parsing failed: %s", exc)

    # list-shaped replies, e.g. autocomplete suggestions
    candidate = _slice_between(clean, "[", "]")
    if candidate is not None:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            pass

    raise ExtractionFailed(text)
