"""
Response normaliser — turns whatever a vision model sent back into a valid
PackagingAnalysis. normalize_response() never raises.

Providers hand over one of three shapes:
  Structured(data)  a decoded object (schema-constrained output)
  RawText(text)     free text, possibly with JSON somewhere inside
  Failure(error)    nothing usable came back

Strategies, in order (first success wins):
  1. structured     all four scores numeric + non-empty suggestions list
  2. embedded JSON  first balanced {...} block in the text
  3. regex          "7/10" / "attention score: 7" / "score: 7" plus a
                    labelled bullet list (or long prose lines as a last resort)
  4. failure        neutral 5/10 everywhere with an explanatory suggestion

Every path guarantees: scores in [1, 10], 1–5 suggestions, non-empty text.
"""
from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from errors import ResponseParseError
from models import (
    MAX_SUGGESTIONS, SCORE_FIELDS, PackagingAnalysis, clamp_score,
)

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 5.0

FAILURE_ANALYSIS   = "Could not analyse this packaging design. The AI response was missing or unreadable."
FAILURE_SUGGESTION = "Could not parse AI suggestions. Please try again."
MISSING_SUGGESTION = "No specific suggestions were returned. Review contrast, hierarchy and logo placement."
MISSING_NARRATIVE  = "No written analysis was provided."


# ── Response shapes ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Structured:
    data: Any                   # Mapping or PackagingAnalysis


@dataclass(frozen=True)
class RawText:
    text: str


@dataclass(frozen=True)
class Failure:
    error: Optional[BaseException] = None


RemoteResponse = Union[Structured, RawText, Failure]


def as_remote_response(response: Any) -> RemoteResponse:
    """Wrap plain values (str, dict, None, exceptions…) in a response shape."""
    if isinstance(response, (Structured, RawText, Failure)):
        return response
    if response is None:
        return Failure()
    if isinstance(response, BaseException):
        return Failure(response)
    if isinstance(response, str):
        return RawText(response)
    if isinstance(response, (PackagingAnalysis, Mapping)):
        return Structured(response)
    return Failure(TypeError(f"Unsupported response type {type(response).__name__}"))


# ── Field helpers ─────────────────────────────────────────────────────────────

def _lookup(data: Mapping, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _coerce_score(value: Any) -> float:
    """Clamp a numeric (or numeric-string) score; 5 when absent or invalid."""
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_SCORE
    if not _is_number(value):
        return DEFAULT_SCORE
    return clamp_score(value)


def _clean_suggestions(items: Any) -> list[str]:
    """Trimmed, de-duplicated, non-empty strings (order preserved)."""
    if not isinstance(items, (list, tuple)):
        return []
    cleaned: list[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        text = item.strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def failure_analysis() -> PackagingAnalysis:
    """The guaranteed-valid result used when nothing can be recovered."""
    return PackagingAnalysis(
        attention_score=DEFAULT_SCORE,
        color_impact=DEFAULT_SCORE,
        readability=DEFAULT_SCORE,
        brand_visibility=DEFAULT_SCORE,
        suggestions=[FAILURE_SUGGESTION],
        analysis=FAILURE_ANALYSIS,
    )


# ── 1. Already structured ─────────────────────────────────────────────────────

def _from_structured(data: Any) -> Optional[PackagingAnalysis]:
    """Return a result if data already conforms to the schema, else None."""
    if isinstance(data, PackagingAnalysis):
        data = data.to_dict()
    if not isinstance(data, Mapping):
        return None

    scores: dict[str, float] = {}
    for attr, wire in SCORE_FIELDS.items():
        value = _lookup(data, wire, attr)
        if not _is_number(value):
            return None
        scores[attr] = clamp_score(value)

    suggestions = data.get("suggestions")
    if not isinstance(suggestions, list) or not all(isinstance(s, str) for s in suggestions):
        return None
    suggestions = [s for s in suggestions if s.strip()]
    if not suggestions:
        return None

    analysis = data.get("analysis")
    if not isinstance(analysis, str) or not analysis.strip():
        analysis = MISSING_NARRATIVE

    return PackagingAnalysis(
        **scores,
        suggestions=suggestions[:MAX_SUGGESTIONS],
        analysis=analysis,
    )


def _structured_as_text(data: Any) -> str:
    if isinstance(data, PackagingAnalysis):
        data = data.to_dict()
    if isinstance(data, Mapping):
        return json.dumps(dict(data), default=str)
    return str(data)


# ── 2. Embedded JSON ──────────────────────────────────────────────────────────

def first_balanced_block(text: str) -> Optional[str]:
    """
    Return the first balanced {...} block in text, or None.
    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json_object(text: str) -> Optional[dict]:
    """Decode the first balanced {...} block of text if it is a JSON object."""
    block = first_balanced_block(text)
    if block is None:
        return None
    try:
        data = json.loads(block)
    except json.JSONDecodeError as exc:
        logger.debug("Embedded JSON block did not decode: %s", exc)
        return None
    return data if isinstance(data, dict) else None


def _from_json(data: dict, raw_text: str) -> PackagingAnalysis:
    scores = {
        attr: _coerce_score(_lookup(data, wire, attr))
        for attr, wire in SCORE_FIELDS.items()
    }
    suggestions = _clean_suggestions(data.get("suggestions"))[:MAX_SUGGESTIONS]
    analysis = data.get("analysis")
    if not isinstance(analysis, str) or not analysis.strip():
        analysis = raw_text.strip()

    return PackagingAnalysis(
        **scores,
        suggestions=suggestions or [MISSING_SUGGESTION],
        analysis=analysis,
    )


# ── 3. Regex fallback ─────────────────────────────────────────────────────────

_SCORE_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*/\s*10"
    r"|attention\s+score\s*:?\s*(\d+(?:\.\d+)?)"
    r"|score\s*:?\s*(\d+(?:\.\d+)?)",
    re.IGNORECASE,
)

_SECTION_LABEL_RE = re.compile(
    r"(?:suggestions?|improvements?|to improve|could improve|enhance|recommendations?)"
    r"[\s*_]*:",
    re.IGNORECASE,
)

_ITEM_RE = re.compile(r"^\s*(?:[-•]\s*|\*\s+|\d+[.)]\s*)(.+?)\s*$")


def extract_score(text: str) -> Optional[float]:
    """First score mentioned in text, clamped to [1, 10]; None if absent."""
    match = _SCORE_RE.search(text)
    if not match:
        return None
    value = next(group for group in match.groups() if group is not None)
    return clamp_score(float(value))


def _labelled_suggestions(text: str) -> list[str]:
    items: list[str] = []
    for label in _SECTION_LABEL_RE.finditer(text):
        # Whatever follows the label on its own line is prose, not an item
        lines = text[label.end():].splitlines()[1:]
        started = False
        for line in lines:
            if not line.strip():
                continue
            item = _ITEM_RE.match(line)
            if item is None:
                break
            started = True
            items.append(item.group(1))
        if not started:
            logger.debug("Label %r not followed by a list", label.group(0))
    return _clean_suggestions(items)


def _prose_suggestions(text: str) -> list[str]:
    lines = [line.strip() for line in text.splitlines()]
    picked = [
        line for line in lines
        if len(line) > 20
        and "score" not in line.lower()
        and "analysis" not in line.lower()
    ]
    return _clean_suggestions(picked)[:MAX_SUGGESTIONS]


def extract_suggestions(text: str) -> list[str]:
    """Labelled bullet/numbered items, else long prose lines (max 5)."""
    suggestions = _labelled_suggestions(text) or _prose_suggestions(text)
    return suggestions[:MAX_SUGGESTIONS]


def _from_free_text(text: str) -> PackagingAnalysis:
    score = extract_score(text)
    suggestions = extract_suggestions(text)
    if score is None and not suggestions:
        raise ResponseParseError("no score and no suggestions found in response text")

    return PackagingAnalysis(
        attention_score=score if score is not None else DEFAULT_SCORE,
        color_impact=DEFAULT_SCORE,
        readability=DEFAULT_SCORE,
        brand_visibility=DEFAULT_SCORE,
        suggestions=suggestions or [MISSING_SUGGESTION],
        analysis=text.strip(),
    )


# ── Entry point ───────────────────────────────────────────────────────────────

def normalize_response(response: Any) -> PackagingAnalysis:
    """
    Coerce any provider response into a valid PackagingAnalysis.
    Accepts a RemoteResponse or a plain str / mapping / PackagingAnalysis / None.
    """
    shaped = as_remote_response(response)
    try:
        if isinstance(shaped, Failure):
            logger.warning("No usable AI response: %s", shaped.error or "empty")
            return failure_analysis()

        if isinstance(shaped, Structured):
            result = _from_structured(shaped.data)
            if result is not None:
                return result
            logger.info("Structured response did not match schema, extracting fields")
            text = _structured_as_text(shaped.data)
        else:
            text = shaped.text or ""

        if not text.strip():
            logger.warning("AI response was empty")
            return failure_analysis()

        data = extract_json_object(text)
        if data is not None:
            return _from_json(data, text)

        logger.info("No JSON object in AI response, falling back to regex extraction")
        return _from_free_text(text)

    except ResponseParseError as exc:
        logger.warning("AI response could not be parsed: %s", exc)
    except Exception:
        logger.exception("Unexpected error while normalising AI response")
    return failure_analysis()
