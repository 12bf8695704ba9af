import json
import logging
import re
import time
from typing import Any, List, Optional

from pydantic import ValidationError

from scorecoach.models.question_models import GeneratedQuestion
from scorecoach.utils.errors import MalformedResponse

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Question text unavailable."
DEFAULT_TOPIC = "General"

# cleared to None when invalid instead of dropping the whole question
OPTIONAL_FIELDS = ("difficulty", "options", "answer", "explanation")

CODE_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        return None


def _unwrap_list(data: Any) -> Optional[list]:
    """A list as-is, or the value of the single array field of a dict."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if isinstance(data.get("questions"), list):
            return data["questions"]
        lists = [v for v in data.values() if isinstance(v, list)]
        if len(lists) == 1:
            return lists[0]
    return None


def _slice_brackets(text: str) -> Optional[list]:
    start, end = text.find("["), text.rfind("]")
    if start == -1 or end <= start:
        return None
    data = _loads(text[start:end + 1])
    return data if isinstance(data, list) else None


def recover_array(raw_text: str) -> Optional[list]:
    """
    Recovery ladder, first success wins:
      1) the whole text is a JSON array
      2) the inner content of a ``` fenced block, retried through 1) and 3)
      3) a JSON object wrapping a single array field ({"questions": [...]})
      4) whatever sits between the first '[' and the last ']'
    """
    text = (raw_text or "").strip()
    if not text:
        return None

    data = _loads(text)
    if isinstance(data, list):
        return data

    fence = CODE_FENCE_RE.search(text)
    if fence:
        inner = fence.group(1).strip()
        unwrapped = _unwrap_list(_loads(inner))
        if unwrapped is not None:
            return unwrapped

    unwrapped = _unwrap_list(data)
    if unwrapped is not None:
        return unwrapped

    return _slice_fallback(fence.group(1) if fence else None, text)


def _slice_fallback(fenced: Optional[str], text: str) -> Optional[list]:
    sliced = _slice_brackets(fenced) if fenced is not None else None
    return sliced if sliced is not None else _slice_brackets(text)


def normalize_question(item: Any, index: int, timestamp: int) -> Optional[GeneratedQuestion]:
    """
    Turn one recovered element into a GeneratedQuestion.

    Only non-objects are dropped. Missing id/text/topic are synthesized.
    An optional field that fails validation is cleared to None so the rest
    of the question survives.
    """
    if not isinstance(item, dict):
        logger.warning("Dropping question %d: expected an object, got %s", index, type(item).__name__)
        return None

    q = dict(item)
    if not str(q.get("id") or "").strip():
        q["id"] = f"question-{timestamp}-{index}"
    else:
        q["id"] = str(q["id"]).strip()
    if not str(q.get("text") or "").strip():
        q["text"] = PLACEHOLDER_TEXT
    else:
        q["text"] = str(q["text"])
    if not str(q.get("topic") or "").strip():
        q["topic"] = DEFAULT_TOPIC
    else:
        q["topic"] = str(q["topic"])

    try:
        return GeneratedQuestion.model_validate(q)
    except ValidationError as e:
        invalid = {err["loc"][0] for err in e.errors() if err.get("loc")}

    cleared = sorted(field for field in invalid if field in OPTIONAL_FIELDS)
    for field in cleared:
        q[field] = None
    logger.warning("Question %d: cleared invalid fields %s", index, ", ".join(cleared))
    return GeneratedQuestion.model_validate(q)


def extract_questions(raw_text: str) -> List[GeneratedQuestion]:
    items = recover_array(raw_text)
    if items is None:
        raise MalformedResponse(raw_text)

    timestamp = int(time.time() * 1000)
    questions = []
    for index, item in enumerate(items):
        question = normalize_question(item, index, timestamp)
        if question is not None:
            questions.append(question)
    return questions
